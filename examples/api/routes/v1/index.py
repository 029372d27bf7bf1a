"""Version root: what this API version offers."""


def register(router):
    @router.get(name="v1_info")
    def info():
        """Describe API version 1."""
        return {"version": "v1", "resources": ["greetings"]}
