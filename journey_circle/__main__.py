"""CLI entry point for the journey_circle package.

Invoke as:  python -m journey_circle --scenario partial
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from PIL import Image

from .config import EngineOptions
from .engine import DiagramEngine, EngineState
from .errors import DiagramError
from .events import FrameRendered
from .model import GraphSnapshot
from .scenarios import (
    scenario_complete,
    scenario_empty,
    scenario_full_problems,
    scenario_no_offers,
    scenario_partial,
)
from .scheduling import ManualScheduler
from .sources import RestGraphSource
from .surface import HostSurface

# ---------------------------------------------------------------------------
# Scenario registry
# ---------------------------------------------------------------------------

SCENARIOS = {
    "full-problems": ("full_problems", scenario_full_problems),
    "partial": ("partial", scenario_partial),
    "empty": ("empty", scenario_empty),
    "no-offers": ("no_offers", scenario_no_offers),
    "complete": ("complete", scenario_complete),
}


def match_scenario(query):
    """Match a query like 'no-offers', 'no_offers' or 'NO-OFFERS' to a registry key."""
    q = query.strip().lower().replace("_", "-")
    if q in SCENARIOS:
        return q
    return None


def load_options(args):
    options = EngineOptions.from_file(args.config) if args.config else EngineOptions()
    if args.size is not None:
        options = options.with_overrides(
            logical_size=args.size, max_size=max(args.size, options.max_size)
        )
    if args.circle_id is not None:
        options = options.with_overrides(circle_id=args.circle_id)
    return options


def render(engine, scheduler, path, fmt, gif_path=None):
    """Play the reveal to the end, then write the final frame (and the GIF)."""
    frames = []
    if gif_path:
        engine.on(FrameRendered, lambda event: frames.append(
            Image.fromarray(engine.surface.rgba_buffer()).convert("RGB")
        ))
    scheduler.run_until_idle()
    engine.save_image(path, fmt)
    print(f"  {path}")
    if frames:
        os.makedirs(os.path.dirname(os.path.abspath(gif_path)), exist_ok=True)
        frames[0].save(gif_path, save_all=True, append_images=frames[1:],
                       duration=int(scheduler.frame_ms), loop=0)
        print(f"  {gif_path} ({len(frames)} frames)")


def render_snapshot(snapshot, stem, args, options):
    scheduler = ManualScheduler()
    engine = DiagramEngine(scheduler=scheduler)
    engine.attach(HostSurface.offscreen(args.dpr), options)
    try:
        gif_path = os.path.join(args.output, f"{stem}.gif") if args.gif else None
        engine.set_data(snapshot)
        render(engine, scheduler, os.path.join(args.output, f"{stem}.{args.format}"),
               args.format, gif_path)
    finally:
        engine.destroy()


def render_remote(args, options):
    if options.circle_id is None:
        print("--api-url needs a circle id (--circle-id or circle_id in --config).")
        return 1
    scheduler = ManualScheduler()
    source = RestGraphSource(args.api_url, nonce=args.nonce)
    engine = DiagramEngine(source=source, scheduler=scheduler)
    engine.attach(HostSurface.offscreen(args.dpr), options)
    try:
        asyncio.run(engine.refresh())
        if engine.state is EngineState.ERROR:
            print(f"Could not load circle {options.circle_id}: {engine.error}")
            return 1
        stem = f"circle_{options.circle_id}"
        gif_path = os.path.join(args.output, f"{stem}.gif") if args.gif else None
        render(engine, scheduler, os.path.join(args.output, f"{stem}.{args.format}"),
               args.format, gif_path)
    finally:
        engine.destroy()
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Render journey circle diagrams to image files."
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--scenario", help="Scenario to render (e.g. partial)")
    group.add_argument("--all", action="store_true", help="Render every scenario")
    group.add_argument("--list", action="store_true", help="List available scenarios")
    group.add_argument("--input", help="Render a snapshot JSON file")
    group.add_argument("--api-url", help="Fetch the circle from a REST API root")
    parser.add_argument("--circle-id", help="Circle to fetch with --api-url")
    parser.add_argument("--nonce", help="X-WP-Nonce header for --api-url")
    parser.add_argument("--output", default="journey_circle_out",
                        help="Output directory (default: journey_circle_out)")
    parser.add_argument("--size", type=float, help="Logical size in pixels")
    parser.add_argument("--dpr", type=float, default=1.0, help="Device pixel ratio")
    parser.add_argument("--format", default="png", help="Image format (png, jpeg, webp, svg, pdf, ...)")
    parser.add_argument("--gif", action="store_true", help="Also write the reveal animation as a GIF")
    parser.add_argument("--config", help="JSON file with engine options")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        print("Available scenarios:")
        for key, (_, func) in SCENARIOS.items():
            print(f"  {key:<15} {func.__doc__}")
        print(f"\n{len(SCENARIOS)} scenarios total.")
        return 0

    try:
        options = load_options(args)
    except (OSError, ValueError) as e:
        print(f"Invalid options: {e}")
        return 1

    try:
        if args.api_url:
            return render_remote(args, options)

        if args.input:
            try:
                with open(args.input, "r") as f:
                    snapshot = GraphSnapshot.from_payload(json.load(f))
            except (OSError, ValueError) as e:
                print(f"Cannot read snapshot {args.input}: {e}")
                return 1
            stem = os.path.splitext(os.path.basename(args.input))[0]
            print(f"{args.input}")
            render_snapshot(snapshot, stem, args, options)
            print("\nRendered 1 diagram(s).")
            return 0

        if args.all:
            keys = list(SCENARIOS)
        else:
            key = match_scenario(args.scenario)
            if key is None:
                print(f"No scenario named '{args.scenario}'.")
                print("Use --list to see available scenarios.")
                return 1
            keys = [key]

        for key in keys:
            stem, func = SCENARIOS[key]
            print(f"{key}/")
            render_snapshot(func(), stem, args, options)
    except DiagramError as e:
        print(f"Render failed: {e}")
        return 1

    print(f"\nRendered {len(keys)} diagram(s).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
