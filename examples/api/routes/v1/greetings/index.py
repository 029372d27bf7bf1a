"""Greeting languages, and creating custom greetings."""

from wren import Request, ValidationFailed

LANGUAGES = {"en": "Hello", "fr": "Bonjour", "es": "Hola"}


def register(router):
    @router.get(name="list_languages")
    def list_languages():
        """List supported greeting languages."""
        return [{"code": code, "word": word} for code, word in LANGUAGES.items()]

    @router.post(name="create_greeting")
    async def create_greeting(request: Request):
        """Build a greeting from a JSON body."""
        data = await request.json()
        name = data.get("name") if isinstance(data, dict) else None
        if not name:
            raise ValidationFailed("name is required", {"field": "name"})
        word = LANGUAGES.get(data.get("lang", "en"), LANGUAGES["en"])
        return ({"greeting": f"{word}, {name}!"}, 201)
