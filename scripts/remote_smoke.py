import os
import sys

import httpx

# Simple smoke test against a running server: player always plays Paper
BASE_URL = os.getenv("RPSBRAIN_URL", "http://localhost:8000")


def main(rounds: int = 10) -> None:
    with httpx.Client(base_url=BASE_URL, timeout=10.0) as client:
        sid = client.post("/sessions", json={"seed": 1}).raise_for_status().json()["session_id"]
        player, ai, outcomes = [], [], []
        wins = draws = losses = 0
        for t in range(rounds):
            res = client.post(f"/sessions/{sid}/decide", json={
                "player_moves": player,
                "ai_moves": ai,
                "outcomes": outcomes,
                "aggression": "ruthless",
                "exploit_enabled": True,
            }).raise_for_status().json()
            trace = client.post(f"/sessions/{sid}/commit", json={"player_move": "paper"}).raise_for_status().json()["trace"]
            player.append("paper")
            ai.append(res["ai_move"])
            outcomes.append(trace["outcome"])
            if trace["outcome"] == "lose":
                wins += 1
            elif trace["outcome"] == "tie":
                draws += 1
            else:
                losses += 1
            print(f"round={t+1} ai_move={res['ai_move']} outcome={trace['outcome']} policy={trace['policy']} conf={trace['confidence']:.2f}")
        client.delete(f"/sessions/{sid}")
    print(f"Summary: wins={wins} draws={draws} losses={losses}")


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 10)
