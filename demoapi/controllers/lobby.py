from swagauth import Controller

# No explicit order: documented after every ordered controller.
lobby = Controller("Lobby")


@lobby.get("/hours")
def get_hours():
    """Get the lobby opening hours."""
    return {"open": "10:00", "close": "23:00"}
