import json
import random
from typing import Dict

from rpsbrain import Aggression, DecisionEngine, HistoryView, Move, Outcome, counter_move, most_frequent_move


def make_player(kind: str, rng: random.Random):
    # simple stochastic opponents
    cycle = [Move.ROCK, Move.PAPER, Move.SCISSORS]

    def play(history: HistoryView, t: int) -> Move:
        if kind == "sticky":
            return Move.ROCK if rng.random() < 0.6 else Move(rng.randrange(3))
        if kind == "cycler":
            return cycle[t % 3]
        if kind == "counter":
            # tries to beat our last move
            last = history.last_ai_move
            return counter_move(last) if last is not None else Move.ROCK
        if kind == "reader":
            # counters the AI's favourite move so far
            fav = most_frequent_move(history.ai_moves)
            return counter_move(fav) if fav is not None else Move.PAPER
        return Move(rng.randrange(3))

    return play


def simulate_session(kind: str, aggression: Aggression, n_rounds: int = 200, seed: int = 7) -> Dict:
    engine = DecisionEngine()
    history = HistoryView(rng=random.Random(seed))
    player = make_player(kind, random.Random(seed + 1))
    ai_wins = 0
    for t in range(n_rounds):
        ai, pending = engine.decide(history, aggression, exploit_enabled=True)
        human = player(history, t)
        trace = engine.commit(pending, human)
        if trace.outcome == Outcome.LOSE:
            ai_wins += 1
        history = history.advance(human, ai)
    return {"ai_win_rate": ai_wins / n_rounds, "weights": dict(engine.weights())}


def run():
    out = {}
    for kind in ("sticky", "cycler", "counter", "reader", "random"):
        out[kind] = {
            str(a): round(simulate_session(kind, a)["ai_win_rate"], 3)
            for a in (Aggression.FAIR, Aggression.NORMAL, Aggression.RUTHLESS)
        }
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    run()
