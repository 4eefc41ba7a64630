"""
visualizer.py — Live Density Viewer
====================================
Paints the density field one colored cell per grid cell:

  pixel = background * (1 - α) + fluid_color * α,   α = clip(density * intensity, 0, 1)

Drag with the mouse to inject dye and push the fluid around. The window can
be any size; matplotlib's imshow handles the scaling from grid cells to
screen pixels.

Only the read contract of the grid is used for drawing: density_view(),
width and height.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation

from fluid2d import SimulationConfig


# Every Nth cell gets an arrow when the velocity overlay is on
VELOCITY_STRIDE = 5


def density_to_rgb(density: np.ndarray, width: int, height: int,
                   color: tuple = (0, 100, 255),
                   background: tuple = (0, 0, 0),
                   intensity: float = 0.5) -> np.ndarray:
    """
    Map a flat density field to an RGB image.

    Args:
        density    : Flat row-major density (length width*height)
        width      : Grid width
        height     : Grid height
        color      : Fluid RGB, 0–255
        background : Background RGB, 0–255
        intensity  : Density → opacity multiplier

    Returns:
        (height, width, 3) float array in [0, 1]
    """
    alpha = np.clip(np.asarray(density, dtype=np.float64).reshape(height, width) * intensity,
                    0.0, 1.0)[:, :, np.newaxis]
    fg = np.asarray(color, dtype=np.float64) / 255.0
    bg = np.asarray(background, dtype=np.float64) / 255.0
    return bg * (1.0 - alpha) + fg * alpha


def data_to_cell(xdata: float, ydata: float, width: int, height: int):
    """
    Grid cell under an imshow data coordinate, or None outside the grid.
    Cell (i, j) covers [i - 0.5, i + 0.5) x [j - 0.5, j + 0.5).
    """
    if xdata is None or ydata is None:
        return None
    i = int(np.floor(xdata + 0.5))
    j = int(np.floor(ydata + 0.5))
    if 0 <= i < width and 0 <= j < height:
        return i, j
    return None


class FluidVisualizer:
    """
    Real-time viewer of the 2D fluid simulation.

    Usage (standalone):
        from fluid2d import FluidSimulation
        from visualizer import FluidVisualizer

        sim = FluidSimulation(width=100, height=100)
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, config: SimulationConfig = None, emitter=None):
        """
        Args:
            simulation : FluidSimulation instance
            config     : Interaction/render settings (defaults if None)
            emitter    : Optional callable(simulation) run before each
                         physics step, a scripted source for recordings
        """
        self.sim = simulation
        self.emitter = emitter
        self.config = config or SimulationConfig()
        self.width = simulation.grid.width
        self.height = simulation.grid.height
        self.frame_count = 0

        self._dragging = False
        self._last_px = None

        self._setup_figure()

    def _setup_figure(self):
        """Initialize the matplotlib figure and mouse handlers."""
        self.fig, self.ax = plt.subplots(figsize=(7, 7))
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.img = self.ax.imshow(
            self._render(),
            interpolation='nearest',
            origin='upper',      # row 0 at the top, like the grid
            aspect='auto',
        )

        self.quiver = None
        if self.config.show_velocity:
            ys, xs = np.mgrid[VELOCITY_STRIDE:self.height:VELOCITY_STRIDE,
                              VELOCITY_STRIDE:self.width:VELOCITY_STRIDE]
            self._quiver_idx = (ys, xs)
            u, v = self._sampled_velocity()
            self.quiver = self.ax.quiver(xs, ys, u, v, color='white',
                                         alpha=0.5, angles='xy')

        self.title_text = self.ax.set_title(
            "Fluid Sim — Frame 0", color='#cccccc',
            fontsize=10, fontfamily='monospace'
        )

        self.fig.canvas.mpl_connect('button_press_event', self.on_press)
        self.fig.canvas.mpl_connect('button_release_event', self.on_release)
        self.fig.canvas.mpl_connect('motion_notify_event', self.on_move)

        plt.tight_layout()

    def _render(self) -> np.ndarray:
        g = self.sim.grid
        c = self.config
        return density_to_rgb(g.density_view(), g.width, g.height,
                              color=c.fluid_color,
                              background=c.background_color,
                              intensity=c.color_intensity)

    def _sampled_velocity(self):
        ys, xs = self._quiver_idx
        g = self.sim.grid
        u = g.velocity_x.reshape(g.height, g.width)[ys, xs]
        v = g.velocity_y.reshape(g.height, g.width)[ys, xs]
        # Screen y points up in quiver space, grid y points down
        return u, -v

    # ── Mouse interaction ─────────────────────────────────────────────────

    def on_press(self, event):
        self._dragging = True
        self._last_px = (event.x, event.y)

    def on_release(self, event):
        self._dragging = False
        self._last_px = None

    def on_move(self, event):
        """Inject dye and momentum at the cell under the cursor while dragging."""
        if not self._dragging or event.inaxes is not self.ax:
            return
        cell = data_to_cell(event.xdata, event.ydata, self.width, self.height)
        if cell is None:
            return

        c = self.config
        last_x, last_y = self._last_px if self._last_px else (event.x, event.y)
        limit = c.max_drag_pixels
        dx = float(np.clip(event.x - last_x, -limit, limit))
        dy = float(np.clip(-(event.y - last_y), -limit, limit))  # display y is up

        self.sim.add_source(cell[0], cell[1], amount=c.density_amount,
                            velocity=(dx * c.velocity_scale, dy * c.velocity_scale))
        self._last_px = (event.x, event.y)

    # ── Animation ─────────────────────────────────────────────────────────

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and redraws."""
        c = self.config
        metrics = None

        if self.frame_count % (c.frame_skip + 1) == 0:
            if self.emitter is not None:
                self.emitter(self.sim)
            if c.density_decay != 1.0 or c.velocity_decay != 1.0:
                self.sim.apply_decay(c.density_decay, c.velocity_decay)
            metrics = self.sim.step()
        self.frame_count = (self.frame_count + 1) % 1000

        self.img.set_data(self._render())
        artists = [self.img, self.title_text]

        if self.quiver is not None:
            self.quiver.set_UVC(*self._sampled_velocity())
            artists.append(self.quiver)

        if metrics is not None:
            self.title_text.set_text(
                f"Fluid Sim — Frame {metrics['frame']} | "
                f"{metrics['fps']:.1f} FPS | "
                f"div_max={metrics['divergence_max']:.5f}"
            )

        return artists

    def run(self, fps: int = 30, frames: int = None):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render (None = infinite)
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=True,
            cache_frame_data=False,
        )
        plt.show()

    def save_gif(self, path, frames: int = 100, fps: int = 10):
        """
        Render frames off-screen into an animated GIF.

        Args:
            path   : Output file
            frames : Frames to step and record
            fps    : Playback rate stored in the GIF
        """
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames,
            interval=1000 // fps, blit=False, repeat=False,
        )
        self.anim.save(str(path), writer=animation.PillowWriter(fps=fps))
        return path
