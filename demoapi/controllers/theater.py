"""Theater controllers, ordered explicitly in the documentation."""

from swagauth import Controller

proscenium = Controller("Proscenium", order=1, prefix="/theater/Proscenium")
thrust = Controller("Thrust", order=2, prefix="/theater/Thrust")
arena = Controller("Arena", order=3, prefix="/theater/Arena")
black_box = Controller("BlackBox", order=4, prefix="/theater/BlackBox")


@proscenium.get("/info")
def get_proscenium_info():
    """Get information about the theater type."""
    return {"type": "Proscenium"}


@proscenium.options("/optionsExample")
def options_example():
    """Options call to demo sorting actions."""
    return {}


@proscenium.put("/putExample")
def put_example():
    """Put call to demo sorting actions."""
    return {}


@proscenium.delete("/deleteExample")
def delete_example():
    """Delete call to demo sorting actions."""
    return {}


@proscenium.post("/postExample")
def post_example():
    """Post call to demo sorting actions."""
    return {}


@proscenium.get("/something", include_in_schema=False)
def get_something_else():
    """Dummy call to show example of hidden item."""
    return {"something": "Anything"}


@thrust.get("/info")
def get_thrust_info():
    """Get information about the theater type."""
    return {"type": "Thrust"}


@arena.get("/info")
def get_arena_info():
    """Get information about the theater type."""
    return {"type": "Arena"}


@black_box.get("/info")
def get_black_box_info():
    """Get information about the theater type."""
    return {"type": "BlackBox"}
