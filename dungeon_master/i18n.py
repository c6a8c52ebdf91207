"""Localized system-message text (English and French).

English is the fallback for unknown languages and missing keys.

Usage:
    t("roll.single", "fr", expression="1d20+2", total=15, dice="13")
"""

DEFAULT_LANG = "en"

STRINGS: dict[str, dict[str, str]] = {
    "en": {
        "roll.single": "Roll result: {expression} = {total} (dice: {dice}). Narrate the outcome using this result.",
        "roll.group_header": "Group roll results (highest first):",
        "roll.group_line": "- {label}: {expression} = {total} (dice: {dice})",
        "roll.group_footer": "Act in this order and narrate the outcome using these results.",
        "reminder.coordinates": (
            "Reminder: end your reply with the party's current map position as "
            "[[coordinates[x: <int>, y: <int>]]]."
        ),
        "reminder.combat": (
            "Reminder: combat is ongoing. Use [[ROLL_GROUP: name=1d20+mod, ...]] for "
            "initiative and [[ROLL: XdY+Z]] for attacks. Never ask the player to roll."
        ),
        "reminder.companions": (
            "Current companions: {names}. Keep them present and acting. Use "
            "[[REMOVE_COMPANION: \"name\"]] if one leaves the party."
        ),
        "fix.protocol": (
            "Your last reply broke the rules. Do not ask the player what they do when a roll "
            "is needed. Rewrite it: describe the action, then output the roll directive "
            "[[ROLL: XdY+Z]] and stop immediately."
        ),
        "fix.coordinates": (
            "You forgot the map position. Reply with ONLY the coordinate directive for the "
            "party's current location, exactly like [[coordinates[x: 0, y: 0]]]."
        ),
        "stats.header": "Character status (authoritative, keep narration consistent):",
        "intro.request": "The adventure begins. Describe the starting scene.",
        "intro.language": "Write all narration in English.",
        "map.start": "Starting point",
        "map.discovered": "Explored area",
        "error.upstream": "The spirits are silent. (Error: {error})",
    },
    "fr": {
        "roll.single": "Résultat du jet : {expression} = {total} (dés : {dice}). Racontez l'issue avec ce résultat.",
        "roll.group_header": "Résultats des jets de groupe (du plus haut au plus bas) :",
        "roll.group_line": "- {label} : {expression} = {total} (dés : {dice})",
        "roll.group_footer": "Agissez dans cet ordre et racontez l'issue avec ces résultats.",
        "reminder.coordinates": (
            "Rappel : terminez votre réponse par la position actuelle du groupe sur la carte "
            "[[coordinates[x: <int>, y: <int>]]]."
        ),
        "reminder.combat": (
            "Rappel : un combat est en cours. Utilisez [[ROLL_GROUP: nom=1d20+mod, ...]] pour "
            "l'initiative et [[ROLL: XdY+Z]] pour les attaques. Ne demandez jamais au joueur de lancer les dés."
        ),
        "reminder.companions": (
            "Compagnons actuels : {names}. Gardez-les présents et actifs. Utilisez "
            "[[REMOVE_COMPANION: \"nom\"]] si l'un d'eux quitte le groupe."
        ),
        "fix.protocol": (
            "Votre dernière réponse enfreint les règles. Ne demandez pas au joueur ce qu'il fait "
            "quand un jet est nécessaire. Réécrivez-la : décrivez l'action, puis écrivez la "
            "directive [[ROLL: XdY+Z]] et arrêtez-vous immédiatement."
        ),
        "fix.coordinates": (
            "Vous avez oublié la position sur la carte. Répondez UNIQUEMENT avec la directive "
            "de coordonnées du lieu actuel, exactement comme [[coordinates[x: 0, y: 0]]]."
        ),
        "stats.header": "État du personnage (référence, gardez la narration cohérente) :",
        "intro.request": "L'aventure commence. Décrivez la scène de départ.",
        "intro.language": "Rédigez toute la narration en français.",
        "map.start": "Point de départ",
        "map.discovered": "Zone explorée",
        "error.upstream": "Les esprits sont silencieux. (Erreur : {error})",
    },
}

# Phrases that hand the turn back to the player.
PLAYER_QUESTIONS: dict[str, list[str]] = {
    "en": [
        "what do you do",
        "what will you do",
        "what would you like to do",
        "what do you want to do",
        "how do you respond",
        "how do you proceed",
        "roll a d20",
        "please roll",
        "make a roll",
    ],
    "fr": [
        "que faites-vous",
        "que fais-tu",
        "que voulez-vous faire",
        "que souhaitez-vous faire",
        "comment réagissez-vous",
        "lancez un d",
        "faites un jet",
    ],
}


def t(key: str, lang: str = DEFAULT_LANG, **kwargs) -> str:
    table = STRINGS.get(lang, STRINGS[DEFAULT_LANG])
    template = table.get(key) or STRINGS[DEFAULT_LANG][key]
    return template.format(**kwargs) if kwargs else template


def asks_player(text: str) -> bool:
    """True if the text hands the decision back to the player, in any language."""
    lowered = text.lower()
    return any(phrase in lowered for phrases in PLAYER_QUESTIONS.values() for phrase in phrases)
