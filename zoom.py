import os
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import numpy as np
import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont
import imageio
from matplotlib import colormaps

from shaderzoom import (
    DEFAULT_CONFIG,
    FrameResult,
    PipelineConfig,
    get_colormap,
    render_frame,
    theta_schedule,
)
from shaderzoom.animation import DEFAULT_SPEED


def detect_device(requested: str | None = None) -> str:
    """Pick the TensorFlow device the escape-time kernel runs on."""

    if requested:
        return requested
    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log("GPU setup failed (%s), using CPU" % e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    gif_path: Path | None
    image_path: Path | None
    frame_dir: Path | None
    save_color_frames: bool
    keep_frames: bool
    image_format: str


def build_parser():
    parser = ArgumentParser(description='Render the animated Mandelbrot zoom to a GIF, frame sequence or still image.')

    parser.add_argument('--width', type=int,
                        dest='width', help='output surface width in pixels',
                        metavar='WIDTH', default=1000)

    parser.add_argument('--height', type=int,
                        dest='height', help='output surface height in pixels',
                        metavar='HEIGHT', default=1000)

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames to generate',
                        metavar='FRAMES', default=200)

    parser.add_argument('--fps', type=float,
                        dest='fps', help='frames per second; each frame advances the animation by 1/FPS seconds and plays for 1/FPS seconds in the GIF',
                        metavar='FPS', default=10.0)

    parser.add_argument('--speed', type=float,
                        dest='speed', help='animation parameter units advanced per second',
                        metavar='SPEED', default=DEFAULT_SPEED)

    parser.add_argument('--start-theta', type=float,
                        dest='start_theta', help='animation parameter of the first frame (zoom is deepest at 1.0)',
                        metavar='THETA', default=0.0)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration cap of the escape-time loop',
                        metavar='MAX_ITERATIONS', default=DEFAULT_CONFIG.max_iterations)

    parser.add_argument('--x-center', type=float,
                        dest='x_center', help='real part of the zoom center',
                        metavar='X_CENTER', default=DEFAULT_CONFIG.center[0])

    parser.add_argument('--y-center', type=float,
                        dest='y_center', help='imaginary part of the zoom center',
                        metavar='Y_CENTER', default=DEFAULT_CONFIG.center[1])

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes to generate. May be repeated. Choices: gif, image, frames.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for single-file outputs (gif/image) or container directory when both are requested.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store frame sequences.')

    parser.add_argument('--keep-frames', dest='keep_frames', action='store_true',
                        help='When generating a GIF, keep the individual frames in frame-dir in addition to the GIF file.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image-based outputs. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--colormap', type=str, default=None, metavar='COLORMAP',
                        help='matplotlib colormap applied to the escape gradient instead of the built-in black/blue/white stops.')

    parser.add_argument('--show-viewport', dest='show_viewport', action='store_true',
                        help='overlay theta, zoom radius and the sampled bounds on every frame')

    parser.add_argument('--device', type=str, default=None,
                        help='TensorFlow device for the escape-time kernel, e.g. "/CPU:0". Defaults to the first GPU if any.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def validate_options(opt, parser: ArgumentParser) -> None:
    if opt.width <= 0 or opt.height <= 0:
        parser.error("--width and --height must be positive.")
    if opt.frames < 0:
        parser.error("--frames must not be negative.")
    if opt.fps <= 0:
        parser.error("--fps must be positive.")
    if opt.max_iterations <= 0:
        parser.error("--max-iterations must be positive.")
    if opt.colormap is not None and opt.colormap not in colormaps:
        parser.error(f"Unknown colormap '{opt.colormap}'; pass any name registered with matplotlib.")


def build_pipeline_config(opt) -> PipelineConfig:
    return replace(
        DEFAULT_CONFIG,
        max_iterations=opt.max_iterations,
        center=(float(opt.x_center), float(opt.y_center)),
    )


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    valid_modes = {"gif", "image", "frames"}
    modes = list(opt.modes or []) or ["gif"]

    normalized_modes: list[str] = []
    for mode in modes:
        if mode not in valid_modes:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")
        if mode not in normalized_modes:
            normalized_modes.append(mode)

    modes_tuple = tuple(normalized_modes)
    modes_set = set(modes_tuple)

    keep_frames = bool(getattr(opt, "keep_frames", False))
    if keep_frames and "gif" not in modes_set:
        parser.error("--keep-frames requires the gif mode.")

    frame_dir_value = getattr(opt, "frame_dir", None)
    needs_frame_dir = "frames" in modes_set or ("gif" in modes_set and keep_frames)
    frame_dir_path: Path | None = None
    if needs_frame_dir:
        frame_dir_path = Path(frame_dir_value or "./frames").expanduser().resolve()
    elif frame_dir_value is not None:
        parser.error("--frame-dir is only valid with the frames mode or --keep-frames.")

    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".") or "png"

    file_modes = [mode for mode in modes_tuple if mode in {"gif", "image"}]
    output_arg = getattr(opt, "output", None)
    gif_path: Path | None = None
    image_path: Path | None = None

    if not file_modes:
        if output_arg:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        mode = file_modes[0]
        if output_arg:
            output_path = Path(output_arg).expanduser()
            if str(output_arg).endswith(tuple(filter(None, {os.sep, os.altsep}))):
                parser.error("--output must be a file path when a single file-based mode is selected.")
            if output_path.is_dir():
                parser.error("--output must point to a file, not a directory, when a single file mode is active.")
            if mode == "gif":
                if output_path.suffix:
                    if output_path.suffix.lower() != ".gif":
                        parser.error("GIF outputs must end with .gif.")
                else:
                    output_path = output_path.with_suffix(".gif")
                gif_path = output_path.resolve()
            else:
                expected_suffix = f".{image_format}"
                if output_path.suffix:
                    if output_path.suffix.lower() != expected_suffix:
                        parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
                else:
                    output_path = output_path.with_suffix(expected_suffix)
                image_path = output_path.resolve()
        elif mode == "gif":
            gif_path = Path("zoom.gif").resolve()
        else:
            image_path = Path(f"frame_final.{image_format}").resolve()
    else:
        base_dir = Path(output_arg).expanduser() if output_arg else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "zoom.gif").resolve()
        image_path = (base_dir / f"frame_final.{image_format}").resolve()

    return OutputConfig(
        modes=modes_tuple,
        gif_path=gif_path,
        image_path=image_path,
        frame_dir=frame_dir_path,
        save_color_frames=needs_frame_dir,
        keep_frames=keep_frames,
        image_format=image_format,
    )


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def _image_for_format(image: PIL.Image.Image, image_format: str) -> PIL.Image.Image:
    # JPEG and BMP cannot store alpha.
    if _pil_format_name(image_format) in {"JPEG", "BMP"} and image.mode == "RGBA":
        return image.convert("RGB")
    return image


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    _image_for_format(image, image_format).save(str(output_path), format=_pil_format_name(image_format))


def write_frame_sequence(
    image: PIL.Image.Image,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
    prefix: str = "frame",
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"{prefix}{index:0{digits}d}.{image_format}"
    frame_dir.mkdir(parents=True, exist_ok=True)
    _image_for_format(image, image_format).save(str(frame_path), format=_pil_format_name(image_format))
    return frame_path


def write_gif(writer: Any, frame_array: np.ndarray) -> None:
    """Append ``frame_array`` to an active GIF writer."""

    writer.append_data(frame_array)


_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
)


def _load_annotation_font(image: PIL.Image.Image) -> PIL.ImageFont.ImageFont:
    target_size = max(12, int(round(max(min(image.size), 1) * 0.025)))
    for path in _FONT_CANDIDATES:
        if Path(path).exists():
            try:
                return PIL.ImageFont.truetype(path, target_size)
            except OSError:
                continue
    return PIL.ImageFont.load_default()


def _draw_text_with_shadow(
    draw: PIL.ImageDraw.ImageDraw,
    position: tuple[float, float],
    text: str,
    font: PIL.ImageFont.ImageFont,
    fill: tuple[int, int, int, int],
    *,
    shadow_fill: tuple[int, int, int, int] = (0, 0, 0, 160),
    shadow_offset: tuple[int, int] = (2, 2),
    spacing: int = 4,
) -> None:
    shadow_position = (position[0] + shadow_offset[0], position[1] + shadow_offset[1])
    draw.multiline_text(shadow_position, text, font=font, fill=shadow_fill, spacing=spacing)
    draw.multiline_text(position, text, font=font, fill=fill, spacing=spacing)


def viewport_caption(result: FrameResult) -> str:
    viewport = result.viewport
    re_min, re_max = viewport.real_bounds
    im_min, im_max = viewport.imag_bounds
    return "\n".join([
        f"theta: {result.theta:.4f}",
        f"zoom: {viewport.radius:.6g}",
        f"Re: [{re_min:.6g}, {re_max:.6g}]",
        f"Im: [{im_min:.6g}, {im_max:.6g}]",
    ])


def annotate_with_viewport(image: PIL.Image.Image, result: FrameResult) -> PIL.Image.Image:
    """Overlay the frame's animation parameter and sampled bounds on ``image``."""

    if image.mode != "RGBA":
        image = image.convert("RGBA")

    overlay = PIL.Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = PIL.ImageDraw.Draw(overlay, "RGBA")
    font = _load_annotation_font(image)
    text = viewport_caption(result)

    padding = 8
    left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, spacing=4)
    box = [(12, 12), (12 + right - left + padding * 2, 12 + bottom - top + padding * 2)]
    draw.rounded_rectangle(box, radius=8, fill=(12, 16, 32, 170), outline=(255, 255, 255, 45))
    _draw_text_with_shadow(draw, (12 + padding - left, 12 + padding - top), text, font, (240, 244, 255, 255))

    return PIL.Image.alpha_composite(image, overlay)


def colorize(result: FrameResult, cmap=None) -> np.ndarray:
    """RGBA uint8 pixels for ``result``, optionally through a matplotlib colormap."""

    if cmap is None:
        return result.to_uint8()
    rgba = np.array(cmap(result.gradient), dtype=np.float64, copy=True)
    rgba[..., 3] = 1.0
    return np.uint8(np.clip(np.rint(rgba * 255), 0, 255))


@dataclass
class OutputWriters:
    config: OutputConfig
    frame_digits: int
    fps: float = 10.0

    def __post_init__(self) -> None:
        self._needs_color_frames = bool(self.config.save_color_frames and self.config.frame_dir is not None)
        self._needs_final_image = bool("image" in self.config.modes and self.config.image_path is not None)
        self._gif_writer = None
        if "gif" in self.config.modes and self.config.gif_path is not None:
            self.config.gif_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(str(self.config.gif_path), mode='I', duration=self.frame_duration_ms, loop=0)

    @property
    def frame_duration_ms(self) -> float:
        # The pillow GIF writer takes per-frame delays in milliseconds.
        return 1000.0 / self.fps

    def requires_frame(self, frame_index: int, total_frames: int) -> bool:
        if self._needs_color_frames or self._gif_writer is not None:
            return True
        return self.should_store_final_image(frame_index, total_frames)

    def should_store_final_image(self, frame_index: int, total_frames: int) -> bool:
        return bool(self._needs_final_image and total_frames and frame_index == total_frames - 1)

    def write_color_outputs(self, frame_index: int, frame_array: np.ndarray, color_image: PIL.Image.Image) -> None:
        if self._gif_writer is not None:
            write_gif(self._gif_writer, frame_array)
        if self._needs_color_frames:
            write_frame_sequence(
                color_image,
                self.config.frame_dir,
                frame_index,
                self.frame_digits,
                self.config.image_format,
            )

    def finalize(self, final_image: PIL.Image.Image | None) -> None:
        if self._needs_final_image and final_image is not None:
            write_single_image(final_image, self.config.image_path, self.config.image_format)

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            self._gif_writer = None


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    validate_options(opt, parser)
    output_config = resolve_output_config(opt, parser)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    device = detect_device(opt.device)
    log("TensorFlow version: %s" % tf.__version__)

    pipeline_config = build_pipeline_config(opt)
    cmap = get_colormap(opt.colormap, pipeline_config) if opt.colormap else None

    thetas = theta_schedule(opt.frames, 1.0 / opt.fps, speed=opt.speed, start=opt.start_theta)
    frame_digits = max(3, len(str(max(opt.frames - 1, 0))))

    writers = OutputWriters(output_config, frame_digits=frame_digits, fps=opt.fps)
    final_image: PIL.Image.Image | None = None

    try:
        for i, theta in enumerate(thetas):
            print("frame {0} out of {1}".format(i, opt.frames), end='\r')
            if not writers.requires_frame(i, opt.frames):
                continue

            result = render_frame(theta, opt.width, opt.height, pipeline_config, device=device)
            log("theta=%.5f zoom=%.6g" % (result.theta, result.viewport.radius))

            frame_array = colorize(result, cmap)
            color_image = PIL.Image.fromarray(frame_array)
            if opt.show_viewport:
                color_image = annotate_with_viewport(color_image, result)
                frame_array = np.array(color_image, copy=True)

            writers.write_color_outputs(i, frame_array, color_image)
            if writers.should_store_final_image(i, opt.frames):
                final_image = color_image
    finally:
        writers.close()

    writers.finalize(final_image)


if __name__ == '__main__':
    main()
