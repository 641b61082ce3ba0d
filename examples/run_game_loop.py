import random

from rpsbrain import Aggression, DecisionEngine, HistoryView, Move


def main():
    engine = DecisionEngine()
    history = HistoryView(rng=random.Random(42))
    human_rng = random.Random(3)
    for i in range(20):
        # AI commits to its move before the human's move is revealed
        ai, pending = engine.decide(history, Aggression.NORMAL, exploit_enabled=i >= 5)
        # Simulated human: mostly repeats rock, sometimes switches
        human = Move.ROCK if human_rng.random() < 0.7 else Move(human_rng.randrange(3))
        trace = engine.commit(pending, human)
        print(f"Round {i+1}: AI={ai} Human={human} Result={trace.outcome} policy={trace.policy} conf={trace.confidence:.2f}")
        print(f"  {trace.reason}")
        history = history.advance(human, ai)


if __name__ == "__main__":
    main()
