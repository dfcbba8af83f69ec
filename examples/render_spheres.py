#!/usr/bin/env python3
"""Render a scene of spheres to a PNG or PPM image.

The scene is either one of the built-in presets or a JSON file in the
format produced by SceneManager.to_dict(). Camera settings come from the
preset; width, samples, depth and aspect ratio can be overridden.

Usage:
    python -m examples.render_spheres [options]

Options:
    --scene NAME          Preset scene (default: two_spheres)
    --scene-file PATH     Load the scene from a JSON file instead
    --width WIDTH         Image width in pixels
    --aspect-ratio RATIO  Image width over height
    --samples SAMPLES     Number of samples per pixel
    --max-depth DEPTH     Maximum ray bounce depth
    --seed SEED           Random seed (default: 0)
    --output OUTPUT       Output file path, .png or .ppm (default: spheres.png)
    --rows-per-batch N    Scanlines rendered between progress updates
    --arch {cpu,gpu}      Taichi backend (default: cpu)
    --quiet               Suppress progress output

Example:
    python -m examples.render_spheres --scene showcase --width 200 --samples 20
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti

SCENE_CHOICES = ("two_spheres", "showcase", "random_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene of spheres.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_CHOICES,
        default="two_spheres",
        help="Preset scene (default: two_spheres)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene file (materials and spheres); the preset still sets the camera",
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument(
        "--aspect-ratio", type=float, default=None, help="Image width divided by height"
    )
    parser.add_argument(
        "--samples", type=int, default=None, help="Number of samples per pixel"
    )
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum bounce depth")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path, .png or .ppm (default: spheres.png)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=16,
        help="Scanlines rendered between progress updates (default: 16)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def load_scene_file(manager, path: str | Path) -> None:
    """Load a JSON scene description into the scene manager.

    Raises:
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {path} must contain a JSON object")
    manager.from_dict(data)


def render_spheres(
    scene: str = "two_spheres",
    scene_file: str | None = None,
    width: int | None = None,
    aspect_ratio: float | None = None,
    samples: int | None = None,
    max_depth: int | None = None,
    seed: int = 0,
    output_path: str = "spheres.png",
    rows_per_batch: int = 16,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from weekend_tracer.core.renderer import Renderer
    from weekend_tracer.scene.manager import SceneManager
    from weekend_tracer.scene.presets import (
        PRESETS,
        camera_for_preset,
        create_random_spheres_scene,
    )

    manager = SceneManager()
    if scene_file is not None:
        if not quiet:
            print(f"Loading scene from {scene_file}...")
        load_scene_file(manager, scene_file)
    elif scene == "random_spheres":
        create_random_spheres_scene(manager, seed=seed)
    else:
        PRESETS[scene](manager)

    camera = camera_for_preset(
        scene,
        image_width=width,
        samples_per_pixel=samples,
        max_depth=max_depth,
        aspect_ratio=aspect_ratio,
    )

    if not quiet:
        print(
            f"Rendering {manager.get_sphere_count()} spheres at "
            f"{camera.image_width}x{camera.image_height}, "
            f"{camera.samples_per_pixel} samples per pixel, depth {camera.max_depth}..."
        )

    renderer = Renderer(camera, seed=seed)
    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            print(
                f"\r  Scanlines remaining: {total_rows - rows_done:5d}",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback, rows_per_batch=rows_per_batch)

    if not quiet:
        print()

    output_file = renderer.save_image(output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, default_fp=ti.f64)
    if not args.quiet:
        print(f"Using {args.arch.upper()} backend")

    try:
        render_spheres(
            scene=args.scene,
            scene_file=args.scene_file,
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
