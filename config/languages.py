"""Supported languages and offline fallback phrase tables.

Codes are what the web client sends; names are what the translation model
expects in prompts.
"""

LANGUAGE_MAP: dict[str, str] = {
    "auto": "auto",

    # Popular EU languages
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "pl": "Polish",
    "nl": "Dutch",

    # Nordic
    "da": "Danish",
    "sv": "Swedish",
    "fi": "Finnish",
    "no": "Norwegian",

    # Major world languages
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "tr": "Turkish",
    "th": "Thai",
    "vi": "Vietnamese",

    # Other EU languages
    "ga": "Irish",
    "mt": "Maltese",
    "cs": "Czech",
    "sk": "Slovak",
    "hu": "Hungarian",
    "sl": "Slovenian",
    "hr": "Croatian",
    "bg": "Bulgarian",
    "ro": "Romanian",
    "lt": "Lithuanian",
    "lv": "Latvian",
    "et": "Estonian",
    "el": "Greek",
}


# Matched as substrings of the input, first hit wins
COMMON_PHRASES: dict[str, dict[str, str]] = {
    "hello": {
        "Danish": "Hej",
        "Swedish": "Hej",
        "Norwegian": "Hei",
        "Finnish": "Hei",
        "German": "Hallo",
        "French": "Bonjour",
        "Spanish": "Hola",
        "Italian": "Ciao",
        "Portuguese": "Olá",
        "Dutch": "Hallo",
        "Polish": "Cześć",
        "Russian": "Привет",
    },
    "good morning": {
        "Danish": "God morgen",
        "Swedish": "God morgon",
        "Norwegian": "God morgen",
        "Finnish": "Hyvää huomenta",
        "German": "Guten Morgen",
        "French": "Bonjour",
        "Spanish": "Buenos días",
        "Dutch": "Goedemorgen",
    },
    "thank you": {
        "Danish": "Tak",
        "Swedish": "Tack",
        "Norwegian": "Takk",
        "Finnish": "Kiitos",
        "German": "Danke",
        "French": "Merci",
        "Spanish": "Gracias",
        "Dutch": "Dank je",
    },
}


# Exact phrase first, then word by word
PATTERN_TRANSLATIONS: dict[str, dict[str, str]] = {
    # Greetings
    "hello": {"Spanish": "hola", "French": "bonjour", "German": "hallo", "Italian": "ciao", "Portuguese": "olá"},
    "hello world": {"Spanish": "hola mundo", "French": "bonjour le monde", "German": "hallo welt", "Italian": "ciao mondo", "Portuguese": "olá mundo"},
    "good morning": {"Spanish": "buenos días", "French": "bonjour", "German": "guten morgen", "Italian": "buongiorno", "Portuguese": "bom dia"},
    "good evening": {"Spanish": "buenas tardes", "French": "bonsoir", "German": "guten abend", "Italian": "buonasera", "Portuguese": "boa tarde"},
    "good night": {"Spanish": "buenas noches", "French": "bonne nuit", "German": "gute nacht", "Italian": "buonanotte", "Portuguese": "boa noite"},

    # Common phrases
    "thank you": {"Spanish": "gracias", "French": "merci", "German": "danke", "Italian": "grazie", "Portuguese": "obrigado"},
    "please": {"Spanish": "por favor", "French": "s'il vous plaît", "German": "bitte", "Italian": "per favore", "Portuguese": "por favor"},
    "excuse me": {"Spanish": "disculpe", "French": "excusez-moi", "German": "entschuldigung", "Italian": "scusi", "Portuguese": "com licença"},
    "yes": {"Spanish": "sí", "French": "oui", "German": "ja", "Italian": "sì", "Portuguese": "sim"},
    "no": {"Spanish": "no", "French": "non", "German": "nein", "Italian": "no", "Portuguese": "não"},

    # Common words
    "cat": {"Spanish": "gato", "French": "chat", "German": "katze", "Italian": "gatto", "Portuguese": "gato"},
    "dog": {"Spanish": "perro", "French": "chien", "German": "hund", "Italian": "cane", "Portuguese": "cão"},
    "water": {"Spanish": "agua", "French": "eau", "German": "wasser", "Italian": "acqua", "Portuguese": "água"},
    "food": {"Spanish": "comida", "French": "nourriture", "German": "essen", "Italian": "cibo", "Portuguese": "comida"},
    "house": {"Spanish": "casa", "French": "maison", "German": "haus", "Italian": "casa", "Portuguese": "casa"},
    "love": {"Spanish": "amor", "French": "amour", "German": "liebe", "Italian": "amore", "Portuguese": "amor"},
    "world": {"Spanish": "mundo", "French": "monde", "German": "welt", "Italian": "mondo", "Portuguese": "mundo"},
    "time": {"Spanish": "tiempo", "French": "temps", "German": "zeit", "Italian": "tempo", "Portuguese": "tempo"},
    "book": {"Spanish": "libro", "French": "livre", "German": "buch", "Italian": "libro", "Portuguese": "livro"},
    "car": {"Spanish": "coche", "French": "voiture", "German": "auto", "Italian": "macchina", "Portuguese": "carro"},
}


def language_name(code: str | None) -> str:
    """Map a language code to its prompt name, passing unknown values through."""
    if not code:
        return "auto"
    return LANGUAGE_MAP.get(code, code)
