"""
main.py — Entry Point
======================
Runs the 2D fluid solver live, headless, or as a benchmark.

Usage:
    python main.py                    # Headless run (default)
    python main.py --mode live        # Interactive window, drag to stir
    python main.py --mode benchmark   # Per-stage timing breakdown
    python main.py --mode live --gif out.gif --frames 60   # Record, no window
"""

import argparse
import dataclasses
import logging

import numpy as np

from fluid2d import FluidSimulation, SimulationConfig


def _emit(sim: FluidSimulation, config: SimulationConfig):
    """Steady dye source near the bottom centre, pushing upward."""
    g = sim.grid
    sim.add_source(g.width // 2, g.height - 3,
                   amount=config.density_amount,
                   velocity=(0.0, -config.velocity_scale * 20))


def run_live(config: SimulationConfig):
    """Live interactive visualization."""
    from visualizer import FluidVisualizer

    print(f"Starting live simulation ({config.grid_size}x{config.grid_size})...")
    print("Drag in the window to add dye. Close the window to exit.\n")

    sim = FluidSimulation.from_config(config)
    viz = FluidVisualizer(sim, config)
    viz.run(fps=30)


def run_gif(config: SimulationConfig, path: str, frames: int = 100):
    """Record the emitter-driven simulation to a GIF without opening a window."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from visualizer import FluidVisualizer

    N = config.grid_size
    print(f"Rendering {frames} frames ({N}x{N}) to {path}...")

    sim = FluidSimulation.from_config(config)
    viz = FluidVisualizer(sim, config, emitter=lambda s: _emit(s, config))
    try:
        viz.save_gif(path, frames=frames)
    finally:
        plt.close(viz.fig)
    print(f"Saved: {path}")


def run_headless(config: SimulationConfig, frames: int = 100):
    """Run simulation without display; prints stats every 10 frames."""
    N = config.grid_size
    print(f"\nHeadless simulation | {N}x{N} | {frames} frames")
    print(f"{'─'*60}")

    sim = FluidSimulation.from_config(config)
    total_times = []

    for f in range(frames):
        _emit(sim, config)
        sim.apply_decay(config.density_decay, config.velocity_decay)
        metrics = sim.step()
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")


def run_benchmark(config: SimulationConfig, frames: int = 50):
    """Per-stage timing breakdown."""
    N = config.grid_size
    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {N}x{N} | {frames} frames")
    print(f"{'='*60}")

    sim = FluidSimulation.from_config(config)

    # Warm up
    for _ in range(5):
        _emit(sim, config)
        sim.step()

    logs = []
    for _ in range(frames):
        _emit(sim, config)
        logs.append(sim.step())

    keys = ["velocity_step_ms", "density_step_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="2D Stable Fluids")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--N",         type=int,   default=defaults.grid_size,
                        help=f"Grid resolution (default: {defaults.grid_size})")
    parser.add_argument("--frames",    type=int,   default=100, help="Number of frames")
    parser.add_argument("--diffusion", type=float, default=defaults.diffusion)
    parser.add_argument("--viscosity", type=float, default=defaults.viscosity)
    parser.add_argument("--dt",        type=float, default=defaults.time_step)
    parser.add_argument("--show-velocity", action="store_true",
                        help="Overlay velocity arrows in live mode")
    parser.add_argument("--frame-skip", type=int, default=defaults.frame_skip)
    parser.add_argument("--gif", metavar="PATH", default=None,
                        help="With --mode live: record --frames frames to a GIF "
                             "instead of opening a window")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def cli(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config = dataclasses.replace(
        SimulationConfig(),
        grid_size=args.N,
        diffusion=args.diffusion,
        viscosity=args.viscosity,
        time_step=args.dt,
        show_velocity=args.show_velocity,
        frame_skip=args.frame_skip,
    )

    if args.mode == "live" and args.gif:
        run_gif(config, args.gif, frames=args.frames)
    elif args.mode == "live":
        run_live(config)
    elif args.mode == "headless":
        run_headless(config, frames=args.frames)
    elif args.mode == "benchmark":
        run_benchmark(config, frames=args.frames)


if __name__ == "__main__":
    cli()
