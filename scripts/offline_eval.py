import json
import math
import random
import sys

import numpy as np

from rpsbrain import HedgeMixer, HistoryView, build_default_experts
from rpsbrain.moves import parse_move
from rpsbrain.utils import entropy


def log_loss(p, y):
    return -math.log(max(1e-8, p[y]))


def ece(probs_list, labels, n_bins=10):
    # Expected Calibration Error (multiclass, one-vs-max)
    confs = np.array([p.max() for p in probs_list])
    preds = np.array([int(np.argmax(p)) for p in probs_list])
    labels = np.array(labels)
    bins = np.linspace(0, 1, n_bins + 1)
    total = len(labels)
    e = 0.0
    for i in range(n_bins):
        m = (confs > bins[i]) & (confs <= bins[i + 1])
        if not np.any(m):
            continue
        acc = np.mean(preds[m] == labels[m])
        conf = float(np.mean(confs[m]))
        e += (np.sum(m) / total) * abs(acc - conf)
    return float(e)


def replay_session(events, probs, labels):
    # one fresh mixer per session, same as a new profile
    mixer = HedgeMixer(build_default_experts())
    history = HistoryView(rng=random.Random(0))
    for e in events:
        player = parse_move(e["player"])
        # sessions recorded without AI moves are replayed against a mirror
        ai = parse_move(e.get("ai", e["player"]))
        p = mixer.predict(history)
        probs.append(p)
        labels.append(int(player))
        mixer.update(history, player)
        history = history.advance(player, ai)
    return mixer


def run_offline(data_path: str):
    # data format: list of {session_id, events:[{player, ai?}, ...]}
    with open(data_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    probs = []
    labels = []
    final_weights = {}
    for sess in data:
        mixer = replay_session(sess.get("events", []), probs, labels)
        final_weights[sess.get("session_id", str(len(final_weights)))] = dict(
            zip(mixer.names, mixer.normalized_weights().round(4).tolist())
        )

    if not labels:
        print(json.dumps({"error": "no events"}, indent=2))
        return
    ll = float(np.mean([log_loss(p, y) for p, y in zip(probs, labels)]))
    acc = float(np.mean([int(np.argmax(p)) == y for p, y in zip(probs, labels)]))
    print(json.dumps({
        "rounds": len(labels),
        "log_loss": ll,
        "uniform_log_loss": math.log(3),
        "accuracy": acc,
        "ece": ece(probs, labels),
        "mean_entropy": float(np.mean([entropy(p) for p in probs])),
        "weights": final_weights,
    }, indent=2))


if __name__ == "__main__":
    run_offline(sys.argv[1])
