from .authorization import authorization
from .lobby import lobby
from .theater import arena, black_box, proscenium, thrust
from .tokens import tokens

CONTROLLERS = [tokens, authorization, proscenium, thrust, arena, black_box, lobby]

__all__ = ["CONTROLLERS", "tokens", "authorization", "proscenium", "thrust", "arena", "black_box", "lobby"]
