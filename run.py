"""
Main entry point for Galaxy of Games - Space Chart.

This script:
1. Initializes Taichi
2. Loads the Steam catalog and current player counts
3. Builds the simulation (one node per game, one cluster per top genre)
4. Runs the main loop: tick → probe query → render

Controls:
  - Arrow keys: Move the probe (spaceship)
  - SPACE: Pause/Resume the layout
  - R: Reheat (restart cooling)
  - ESC: Exit

Usage:
    python run.py [--games data/steam_games.csv] [--players data/current_players.csv]
    python run.py --headless-ticks 500
"""

import argparse

import taichi as ti

from config import (
    DEFAULT_GAMES_CSV, DEFAULT_PLAYERS_CSV, MIN_PLAYERS, CLUSTER_CENTERS,
    SPACE_WIDTH, SPACE_HEIGHT,
)
from loader import load_space_records
from probe import KEY_TO_DIRECTION
from simulation import Simulation, RUNNING, PAUSED, STOPPED


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Galaxy of Games space chart")
    parser.add_argument("--games", default=DEFAULT_GAMES_CSV,
                        help=f"Steam catalog CSV (default: {DEFAULT_GAMES_CSV})")
    parser.add_argument("--players", default=DEFAULT_PLAYERS_CSV,
                        help=f"Current player counts CSV (default: {DEFAULT_PLAYERS_CSV})")
    parser.add_argument("--min-players", type=int, default=MIN_PLAYERS,
                        help=f"Drop games with fewer current players (default: {MIN_PLAYERS})")
    parser.add_argument("--arch", choices=["cpu", "gpu"], default="cpu",
                        help="Taichi backend (default: cpu)")
    parser.add_argument("--headless-ticks", type=int, default=0,
                        help="Run this many ticks without a window and print a summary")
    return parser.parse_args(argv)


def run_headless(sim, ticks):
    event = sim.run(ticks)
    print(f"[Headless] {ticks} ticks, alpha={sim.alpha:.5f}, max overlap={sim.max_overlap():.3f}px")
    for cluster in event["clusters"]:
        print(f"           {cluster['label']:<12} halo={cluster['halo_radius']:.1f}px")


def run_window(sim):
    from render import SpaceRenderer, open_window

    gui = open_window()
    renderer = SpaceRenderer(gui, sim.registry, SPACE_WIDTH, SPACE_HEIGHT)

    print("\n" + "=" * 70)
    print("GALAXY OF GAMES - SPACE CHART")
    print("=" * 70)
    print("Controls:")
    print("  - Arrow keys: Move probe")
    print("  - SPACE: Pause/Resume")
    print("  - R: Reheat layout")
    print("  - ESC: Exit")
    print("=" * 70 + "\n")

    event = sim.snapshot()
    while gui.running and sim.state != STOPPED:
        for e in gui.get_events(ti.GUI.PRESS):
            if e.key == ti.GUI.ESCAPE:
                print("[Control] Exiting...")
                sim.stop()
            elif e.key == ti.GUI.SPACE:
                if sim.state == RUNNING:
                    sim.pause()
                elif sim.state == PAUSED:
                    sim.resume()
                print(f"[Control] {sim.state.capitalize()}")
            elif e.key in ("r", "R"):
                sim.reheat()
                print("[Control] Reheated")
            elif e.key in KEY_TO_DIRECTION:
                sim.move_probe(KEY_TO_DIRECTION[e.key])
                renderer.update_tooltip(sim.probe_query())

        tick_event = sim.tick()
        if tick_event is not None:
            event = tick_event
            if event["tick"] % 300 == 0:
                print(f"[Tick {event['tick']:5d}] alpha={sim.alpha:.5f} max overlap={sim.max_overlap():.3f}px")

        renderer.draw(event, sim.probe)
        gui.show()


def main(argv=None):
    args = parse_args(argv)
    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)
    print(f"[Taichi] Initialized with backend: {ti.cfg.arch}")

    records = load_space_records(args.games, args.players, args.min_players)
    sim = Simulation(CLUSTER_CENTERS)
    sim.load(records)

    if args.headless_ticks > 0:
        run_headless(sim, args.headless_ticks)
    else:
        run_window(sim)


if __name__ == "__main__":
    main()
