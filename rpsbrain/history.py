from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from .moves import Move, Outcome, parse_move, parse_outcome, resolve


@dataclass(frozen=True, eq=False)
class HistoryView:
    """Read-only view of one session's rounds plus the round's random source.

    The three sequences are parallel: index ``i`` holds the player's move,
    the AI's move and the player's outcome of round ``i``. The caller owns
    the real history; experts and the engine only ever see these tuples.
    """

    player_moves: Tuple[Move, ...] = ()
    ai_moves: Tuple[Move, ...] = ()
    outcomes: Tuple[Outcome, ...] = ()
    rng: random.Random = field(default_factory=lambda: random.Random(42))

    def __post_init__(self) -> None:
        object.__setattr__(self, "player_moves", tuple(parse_move(m) for m in self.player_moves))
        object.__setattr__(self, "ai_moves", tuple(parse_move(m) for m in self.ai_moves))
        object.__setattr__(self, "outcomes", tuple(parse_outcome(o) for o in self.outcomes))
        n = len(self.player_moves)
        if len(self.ai_moves) != n or len(self.outcomes) != n:
            raise ValueError(
                f"history sequences must have equal length: player={n} "
                f"ai={len(self.ai_moves)} outcomes={len(self.outcomes)}"
            )

    def __len__(self) -> int:
        return len(self.player_moves)

    @property
    def last_player_move(self) -> Optional[Move]:
        return self.player_moves[-1] if self.player_moves else None

    @property
    def last_ai_move(self) -> Optional[Move]:
        return self.ai_moves[-1] if self.ai_moves else None

    @property
    def last_outcome(self) -> Optional[Outcome]:
        return self.outcomes[-1] if self.outcomes else None

    def advance(self, player: Move, ai: Move) -> "HistoryView":
        """Return the view for the next round, sharing the same random source."""
        return HistoryView(
            player_moves=self.player_moves + (player,),
            ai_moves=self.ai_moves + (ai,),
            outcomes=self.outcomes + (resolve(player, ai),),
            rng=self.rng,
        )

    @staticmethod
    def from_rounds(rounds: Iterable[Tuple[Move, Move]], rng: Optional[random.Random] = None) -> "HistoryView":
        """Build a view from (player, ai) pairs, deriving the outcomes."""
        player, ai = [], []
        for p, a in rounds:
            player.append(parse_move(p))
            ai.append(parse_move(a))
        return HistoryView(
            player_moves=tuple(player),
            ai_moves=tuple(ai),
            outcomes=tuple(resolve(p, a) for p, a in zip(player, ai)),
            rng=rng if rng is not None else random.Random(42),
        )
