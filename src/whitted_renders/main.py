import argparse
import os
import sys
import time
import numpy as np
import PIL.Image
from whitted_renders import constants
from whitted_renders.core import Renderer
from whitted_renders.environment import EnvironmentMap, ResourceError
from whitted_renders.scene import build_default_scene, build_single_sphere_scene


def save_image(pixels, path):
    """Encode an (H, W, 3) uint8 array to an image file at path."""
    try:
        PIL.Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
    except (OSError, ValueError) as exc:
        raise ResourceError(f"Cannot write image {path}: {exc}") from exc


def build_renderer(args):
    """Create a renderer from parsed CLI arguments."""
    checkerboard = not args.no_floor
    if args.single_sphere:
        scene = build_single_sphere_scene(checkerboard=checkerboard)
    else:
        scene = build_default_scene(checkerboard=checkerboard)

    environment = None
    if args.envmap:
        print(f"Loading environment map {args.envmap}...")
        environment = EnvironmentMap.from_file(args.envmap)
        print(f"  {environment.width}x{environment.height}")

    return Renderer(scene, environment, width=args.width, height=args.height,
                    fov=np.deg2rad(args.fov))


def render_to_file(renderer, output):
    """Render a full frame and write it to output."""
    directory = os.path.dirname(output)
    if directory and not os.path.isdir(directory):
        raise ResourceError(f"Output directory {directory} does not exist")

    print(f"Rendering {renderer.width}x{renderer.height}...")
    t0 = time.time()
    img = renderer.render()
    print(f"  Complete in {time.time() - t0:.2f}s")

    save_image(img, output)
    print(f"Saved {output}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Whitted Ray Tracer CLI")
    parser.add_argument("--output", "-o", default=constants.DEFAULT_OUTPUT, help="Output image path")
    parser.add_argument("--envmap", default=None, help="Environment map image for escaping rays")
    parser.add_argument("--width", type=int, default=constants.DEFAULT_WIDTH, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=constants.DEFAULT_HEIGHT, help="Image height in pixels")
    parser.add_argument("--fov", type=float, default=float(np.rad2deg(constants.DEFAULT_FOV)),
                        help="Vertical field of view in degrees")
    parser.add_argument("--no-floor", action="store_true", help="Remove the checkerboard floor")
    parser.add_argument("--single-sphere", action="store_true", help="Render the one-sphere test scene")
    parser.add_argument("--ui", action="store_true", help="Launch the interactive Gradio UI")
    parser.add_argument("--layout", default=None, metavar="PATH",
                        help="Save a scene layout diagram to PATH instead of rendering")

    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")

    try:
        renderer = build_renderer(args)
        if args.ui:
            from whitted_renders.ui import create_ui
            print("Launching UI...")
            demo = create_ui(renderer.environment, single_sphere=args.single_sphere,
                             floor=not args.no_floor)
            demo.launch()
        elif args.layout:
            from whitted_renders.tools.visualize_scene import save_layout
            save_layout(renderer.scene, args.layout, fov=renderer.fov,
                        aspect_ratio=renderer.width / renderer.height)
            print(f"Saved {args.layout}")
        else:
            render_to_file(renderer, args.output)
    except ResourceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def run_render():
    """Entry point for whitted-render command."""
    sys.exit(main())


def run_ui():
    """Entry point for whitted-ui command."""
    sys.exit(main(["--ui"]))


def run_layout():
    """Entry point for whitted-layout command."""
    sys.exit(main(["--layout", "layout.png"]))


if __name__ == "__main__":
    sys.exit(main())
