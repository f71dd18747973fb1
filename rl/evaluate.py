"""
Evaluation script for scripted Galaxy Defender policies
"""

import argparse
import json
import time
from typing import Callable, Dict, List, Optional

import numpy as np

from game.galaxy import GalaxyDefenderEnv
from rl.configs.galaxy_config import ENV_CONFIG, EVAL_CONFIG

Policy = Callable[[GalaxyDefenderEnv, np.ndarray], int]

# How far above the rocket a harmful object counts as a threat (px)
LOOKAHEAD = 260.0
SAFETY_MARGIN = 10.0


def random_policy(env: GalaxyDefenderEnv, obs: np.ndarray) -> int:
    return int(env.action_space.sample())


def center_policy(env: GalaxyDefenderEnv, obs: np.ndarray) -> int:
    return env.n_pointer_bins // 2


def dodge_policy(env: GalaxyDefenderEnv, obs: np.ndarray) -> int:
    """
    Pick the pointer bin with the lowest cost.

    Cost is dominated by harmful objects falling into the bin soon, then by
    the distance to the closest reachable star, then by how far the rocket
    has to travel.
    """
    session = env.session
    player = session.player
    width = env.game_config.width

    best_action, best_cost = 0, float("inf")
    for action in range(env.n_pointer_bins):
        x = env.pointer_for_action(action)

        danger = 0.0
        star_dist = width
        for obj in session.objects.values():
            dy = player.y - obj.y
            if dy < -obj.height or dy > LOOKAHEAD:
                continue
            reach = (player.width + obj.width) / 2 + SAFETY_MARGIN
            if obj.harmful:
                if abs(obj.x - x) < reach:
                    # closer hazards weigh more
                    danger += 1.0 + (LOOKAHEAD - dy) / LOOKAHEAD
            else:
                star_dist = min(star_dist, abs(obj.x - x))

        cost = danger * 1000.0 + star_dist + abs(x - player.x) * 0.1
        if cost < best_cost:
            best_action, best_cost = action, cost
    return best_action


POLICIES: Dict[str, Policy] = {
    "random": random_policy,
    "center": center_policy,
    "dodge": dodge_policy,
}


def evaluate_policy(
    policy: str = "dodge",
    n_episodes: int = 10,
    render: bool = False,
    seed: Optional[int] = None,
    env_kwargs: Optional[dict] = None,
):
    """
    Evaluate a scripted policy

    Args:
        policy: One of 'random', 'center' or 'dodge'
        n_episodes: Number of episodes to evaluate
        render: Whether to render the environment
        seed: Random seed for the first episode (incremented per episode)
        env_kwargs: Overrides for ENV_CONFIG
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown policy: {policy}")
    act = POLICIES[policy]

    kwargs = dict(ENV_CONFIG)
    kwargs.update(env_kwargs or {})
    env = GalaxyDefenderEnv(render_mode="human" if render else None, **kwargs)
    if seed is not None:
        env.action_space.seed(seed)

    episodes: List[Dict] = []
    for episode in range(n_episodes):
        obs, info = env.reset(seed=None if seed is None else seed + episode)

        done = False
        total_reward = 0.0
        steps = 0
        while not done:
            obs, reward, terminated, truncated, info = env.step(act(env, obs))
            total_reward += reward
            steps += 1
            done = terminated or truncated
            if render:
                time.sleep(env.game_config.frame_ms / 1000.0)

        episodes.append({
            "episode": episode,
            "return": total_reward,
            "steps": steps,
            "score": info["score"],
            "survival_seconds": info["survival_seconds"],
            "level": info["level"],
            "crashed": info["state"] == "game_over",
        })
        print(f"Episode {episode + 1}: Return = {total_reward:.2f}, Score = {info['score']}, "
              f"Survived = {info['survival_seconds']}s, Level = {info['level']}")

    env.close()

    returns = np.array([e["return"] for e in episodes])
    scores = np.array([e["score"] for e in episodes])
    survival = np.array([e["survival_seconds"] for e in episodes])
    levels = np.array([e["level"] for e in episodes])

    results = {
        "policy": policy,
        "n_episodes": n_episodes,
        "mean_return": float(np.mean(returns)),
        "std_return": float(np.std(returns)),
        "mean_score": float(np.mean(scores)),
        "std_score": float(np.std(scores)),
        "mean_survival_seconds": float(np.mean(survival)),
        "mean_level": float(np.mean(levels)),
        "crash_rate": float(np.mean([e["crashed"] for e in episodes])),
        "episodes": episodes,
    }

    print("\n" + "=" * 50)
    print(f"Evaluation Results ({n_episodes} episodes, policy: {policy})")
    print("=" * 50)
    print(f"Mean Return: {results['mean_return']:.2f} +/- {results['std_return']:.2f}")
    print(f"Mean Score: {results['mean_score']:.1f} +/- {results['std_score']:.1f}")
    print(f"Mean Survival: {results['mean_survival_seconds']:.1f}s")
    print(f"Mean Level: {results['mean_level']:.2f}")
    print(f"Crash Rate: {results['crash_rate']:.0%}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Evaluate scripted Galaxy Defender policies")
    parser.add_argument("--policy", type=str, default="dodge", choices=sorted(POLICIES),
                        help="Policy to evaluate")
    parser.add_argument("--episodes", type=int, default=EVAL_CONFIG["n_episodes"],
                        help="Number of episodes")
    parser.add_argument("--seed", type=int, default=EVAL_CONFIG["seed"], help="Random seed")
    parser.add_argument("--render", action="store_true", help="Render the episodes")
    parser.add_argument("--max-steps", type=int, default=None, help="Override episode length")
    parser.add_argument("--output", type=str, default=None,
                        help="Write the results as JSON to this path")

    args = parser.parse_args()

    env_kwargs = {}
    if args.max_steps is not None:
        env_kwargs["max_steps"] = args.max_steps

    results = evaluate_policy(
        policy=args.policy,
        n_episodes=args.episodes,
        render=args.render,
        seed=args.seed,
        env_kwargs=env_kwargs,
    )

    if args.output:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
