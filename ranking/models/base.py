# Ranking tables share db.Base so main.create_all() sees them
from db import Base

__all__ = ["Base"]
