class Translator:
    # Very short weekday symbols, Sunday first.
    WEEKDAY_SYMBOLS = {
        "en": ["S", "M", "T", "W", "T", "F", "S"],
        "sl": ["N", "P", "T", "S", "Č", "P", "S"],
    }

    def __init__(self) -> None:
        self.language = "en"
        self.translations = {
            "en": {},
            "sl": {
                "Calendar": "Koledar",
                "Workouts": "Vadbe",
                "Workout": "Vadba",
                "Exercise": "Vaja",
                "Start workout": "Začni vadbo",
                "No workouts.": "Ni vadb.",
                "Add exercise": "Dodaj vajo",
                "Add set": "Dodaj serijo",
                "Change": "Zamenjaj",
                "Choose exercise": "Izberi vajo",
                "Search exercises": "Išči vaje",
                "Use custom name": "Uporabi svoje ime",
                "Muscle group": "Mišična skupina",
                "Reps": "Ponovitve",
                "Title": "Naslov",
                "Date": "Datum",
                "Save": "Shrani",
                "Delete": "Izbriši",
                "Settings": "Nastavitve",
                "Language": "Jezik",
            },
        }

    def set_language(self, lang: str) -> None:
        self.language = lang

    def gettext(self, key: str) -> str:
        return self.translations.get(self.language, {}).get(key, key)

    def weekday_symbols(self, lang: str | None = None) -> list[str]:
        lang = lang or self.language
        return list(self.WEEKDAY_SYMBOLS.get(lang, self.WEEKDAY_SYMBOLS["en"]))

translator = Translator()
