#!/usr/bin/env python3
"""Render a preset scene progressively and save the result.

This script drives the renderer the way an interactive host would: it calls
render() once per frame with accumulation enabled, optionally orbits the
camera partway through to show accumulation restarting, and writes the final
running mean to a PNG.

Usage:
    python -m examples.render_default_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --height HEIGHT         Image height in pixels (default: 300)
    --frames FRAMES         Number of frames to accumulate (default: 64)
    --scene {default,showcase}
                            Preset scene to render (default: default)
    --rows-per-task ROWS    Image rows per worker task (default: 1)
    --threads THREADS       Worker threads, 0 for all cores (default: 0)
    --candidates N          Light candidates per pixel (default: 2)
    --turn-at FRAME         Rotate the camera before this frame (default: off)
    --output OUTPUT         Output file path (default: default_scene.png)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_default_scene --scene showcase --frames 128
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene progressively.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=300, help="Image height in pixels (default: 300)")
    parser.add_argument(
        "--frames",
        type=int,
        default=64,
        help="Number of frames to accumulate (default: 64)",
    )
    parser.add_argument(
        "--scene",
        choices=("default", "showcase"),
        default="default",
        help="Preset scene to render (default: default)",
    )
    parser.add_argument(
        "--rows-per-task",
        type=int,
        default=1,
        help="Image rows per worker task (default: 1)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=0,
        help="Worker threads, 0 for all cores (default: 0)",
    )
    parser.add_argument(
        "--candidates",
        type=int,
        default=2,
        help="Light candidates per pixel (default: 2)",
    )
    parser.add_argument(
        "--turn-at",
        type=int,
        default=-1,
        help="Rotate the camera before this frame (default: off)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="default_scene.png",
        help="Output file path (default: default_scene.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_preset(
    scene_name: str = "default",
    width: int = 400,
    height: int = 300,
    num_frames: int = 64,
    rows_per_task: int = 1,
    num_threads: int = 0,
    max_light_candidates: int = 2,
    turn_at: int = -1,
    output_path: str = "default_scene.png",
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save the running mean to file.

    Args:
        scene_name: "default" or "showcase".
        width: Image width in pixels.
        height: Image height in pixels.
        num_frames: Number of frames to render.
        rows_per_task: Image rows per worker task.
        num_threads: Worker threads, 0 for all cores.
        max_light_candidates: Light candidates per pixel.
        turn_at: Frame before which the camera turns; negative disables.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.config import FrameState, RenderConfig
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.preview.export import save_png
    from src.pathtracer.scene.presets import create_default_scene, create_showcase_scene

    if not quiet:
        print(f"Creating {scene_name} scene ({width}x{height})...")

    if scene_name == "showcase":
        scene, camera = create_showcase_scene()
    else:
        scene, camera = create_default_scene()
    camera.on_resize(width, height)

    renderer = ProgressiveRenderer(
        RenderConfig(
            max_light_candidates=max_light_candidates,
            rows_per_task=rows_per_task,
            num_threads=num_threads,
        )
    )

    if not quiet:
        print(f"Rendering {num_frames} frames...")

    start_time = time.time()
    pixels = b""
    for frame in range(num_frames):
        if frame == turn_at:
            # Roughly 10 degrees to the left
            camera.rotate((-90.0, 0.0))
        pixels = renderer.render(scene, camera, FrameState(accumulate=True))

        if not quiet:
            elapsed = time.time() - start_time
            fps = (frame + 1) / elapsed if elapsed > 0 else 0
            print(
                f"\r  Frame {frame + 1}/{num_frames} "
                f"(accumulated {scene.frame_index}) - {fps:.1f} frames/s",
                end="",
                flush=True,
            )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(pixels, width, height, str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)
    ti.init(arch=ti.cpu)

    try:
        render_preset(
            scene_name=args.scene,
            width=args.width,
            height=args.height,
            num_frames=args.frames,
            rows_per_task=args.rows_per_task,
            num_threads=args.threads,
            max_light_candidates=args.candidates,
            turn_at=args.turn_at,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
