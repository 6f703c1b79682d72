import gradio as gr
import numpy as np
import PIL.Image
from .core import Renderer
from .scene import build_default_scene, build_single_sphere_scene

# Dark viewport; the previous frame stays on screen while the next one renders
CSS = """
.gradio-container { background-color: #10131a !important; }
#output_img { border: none !important; border-radius: 6px; }
#output_img img { object-fit: contain; }
.generating, .pending { opacity: 1 !important; filter: none !important; }
.progress-view, .loader { display: none !important; }
"""

DEFAULT_FOV_DEG = 90
DEFAULT_RESOLUTION = 256


def render_preview(renderer, fov_deg, resolution):
    """Render one complete 4:3 frame at the given width."""
    w = int(resolution)
    h = int(resolution * 0.75)
    image_data = renderer.render(width=w, height=h, fov=float(np.deg2rad(fov_deg)))
    return PIL.Image.fromarray(image_data)


def create_ui(environment=None, single_sphere=False, floor=True):
    """
    Build the preview app.

    Args:
        environment: EnvironmentMap shared by both renderers (None for the solid background)
        single_sphere: Preview the one-sphere scene instead of the four-sphere one
        floor: Initial state of the floor toggle
    """
    build_scene = build_single_sphere_scene if single_sphere else build_default_scene
    renderers = {
        True: Renderer(build_scene(checkerboard=True), environment),
        False: Renderer(build_scene(checkerboard=False), environment),
    }

    def render_frame(fov, use_floor, resolution):
        return render_preview(renderers[bool(use_floor)], fov, resolution)

    with gr.Blocks(title="Whitted Renderer") as demo:

        gr.Markdown("# Whitted Renderer")
        gr.Markdown("Recursive ray tracing of spheres over a checkerboard floor.")

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Group():
                    gr.Markdown("### 🎥 Camera Settings")
                    fov_slider = gr.Slider(minimum=20, maximum=150, value=DEFAULT_FOV_DEG,
                                           label="Field of View (FOV)", info="Vertical angle in degrees")
                    res_slider = gr.Slider(minimum=64, maximum=1024, value=DEFAULT_RESOLUTION, step=64,
                                           label="Render Resolution", info="Lower for speed, higher for quality")
                    reset_btn = gr.Button("🔄 Reset Viewport", variant="secondary")

                with gr.Group():
                    gr.Markdown("### 🧱 Scene")
                    floor_toggle = gr.Checkbox(value=floor, label="Checkerboard Floor")

            with gr.Column(scale=2):
                output_img = gr.Image(label="Viewport", interactive=False, elem_id="output_img")

        inputs = [fov_slider, floor_toggle, res_slider]

        def reset_view():
            return [DEFAULT_FOV_DEG, floor, DEFAULT_RESOLUTION]

        reset_btn.click(fn=reset_view, outputs=inputs)

        # Re-render on any change
        for input_comp in inputs:
            input_comp.change(fn=render_frame, inputs=inputs, outputs=output_img,
                              trigger_mode="always_last", show_progress="hidden")

        # Initial render
        demo.load(fn=render_frame, inputs=inputs, outputs=output_img, show_progress="hidden")

    return demo


if __name__ == "__main__":
    demo = create_ui()
    demo.launch(css=CSS)
