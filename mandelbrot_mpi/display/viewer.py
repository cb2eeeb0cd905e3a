"""Interactive matplotlib window on the root participant.

Keys:
    arrows   pan by config.pan_fraction of the real range
    1 / 2    zoom in / out by config.zoom_factor
    s        save the current image
    q        quit (also on closing the window)

The window runs on the main thread and the render coordinator on its own.
The viewer never touches the coordinator's viewport directly: every change
goes through the coordinator, which refuses it while a render is running.
"""

from mandelbrot_mpi import config
from mandelbrot_mpi.display.image_io import default_image_path
from mandelbrot_mpi.display.image_io import save_image, unpack_rgb
from mandelbrot_mpi.mandelbrot_exceptions import RenderInProgress
import mandelbrot_mpi.utilities.log as log


class MandelbrotViewer(object):

    pan_keys = {'left': (-1, 0),
                'right': (1, 0),
                'up': (0, -1),
                'down': (0, 1)}

    def __init__(self, coordinator, zoom_factor=config.zoom_factor,
                 datadir=config.default_datadir):

        self.coordinator = coordinator
        self.zoom_factor = zoom_factor
        self.datadir = datadir

        self.fig = None
        self._ax = None
        self._artist = None
        self._timer = None
        self._shown = None
        self._pending_resolution = None

    #--------------------------------------------------------------------------
    # Input handling, independent of the window
    #--------------------------------------------------------------------------
    def handle_key(self, key):
        """Apply one key press.  Returns True if a render was requested."""

        coordinator = self.coordinator

        if key == 'q':
            self.on_shutdown_requested()
            return False
        if key == 's':
            if coordinator.render_in_progress():
                log.info('Save ignored while rendering')
            else:
                self.on_save_requested()
            return False

        try:
            if key in self.pan_keys:
                coordinator.pan(*self.pan_keys[key])
            elif key == '1':
                coordinator.zoom(self.zoom_factor)
            elif key == '2':
                coordinator.zoom(1.0 / self.zoom_factor)
            else:
                return False
        except RenderInProgress:
            log.debug('Key %r ignored while rendering' % key)
            return False

        return coordinator.request_render()

    def handle_resize(self, width, height):
        """Remember a new window size; applied once the coordinator is idle."""

        if width > 0 and height > 0:
            self._pending_resolution = (int(width), int(height))
        return self.apply_pending_resize()

    def apply_pending_resize(self):
        if self._pending_resolution is None:
            return False

        viewport = self.coordinator.viewport
        if self.coordinator.on_viewport_changed(viewport.bounds,
                                                self._pending_resolution):
            self._pending_resolution = None
            return True
        return False

    def on_save_requested(self, path=None):
        """Save the latest image and return the path written."""

        if path is None:
            path = default_image_path(self.datadir)
        return save_image(self.coordinator.current_image(), path, verbose=True)

    def on_shutdown_requested(self):
        self.coordinator.on_shutdown_requested()
        if self.fig is not None:
            import matplotlib.pyplot as plt
            plt.close(self.fig)

    #--------------------------------------------------------------------------
    # Window
    #--------------------------------------------------------------------------
    def show(self):
        """Open the window and block until it is closed."""

        import matplotlib.pyplot as plt

        # Arrow keys and 's'/'q' are ours, not the toolbar's
        for name in ('keymap.back', 'keymap.forward', 'keymap.save',
                     'keymap.quit', 'keymap.home', 'keymap.pan'):
            plt.rcParams[name] = []

        viewport = self.coordinator.viewport
        dpi = 100.0
        self.fig = plt.figure(figsize=(viewport.width / dpi,
                                       viewport.height / dpi), dpi=dpi)
        self.fig.canvas.manager.set_window_title(config.window_title)
        ax = self.fig.add_axes([0, 0, 1, 1])
        ax.set_axis_off()
        self._ax = ax

        self.fig.canvas.mpl_connect('key_press_event',
                                    lambda event: self.handle_key(event.key))
        self.fig.canvas.mpl_connect('resize_event', self._on_resize)
        self.fig.canvas.mpl_connect('close_event',
                                    lambda event: self.coordinator.on_shutdown_requested())

        self._timer = self.fig.canvas.new_timer(
            interval=config.display_refresh_interval)
        self._timer.add_callback(self.refresh)
        self._timer.start()

        self.coordinator.request_render()
        plt.show()

    def _on_resize(self, event):
        self.handle_resize(event.width, event.height)

    def refresh(self):
        """Paint the latest image if it changed; retry deferred resizes."""

        self.apply_pending_resize()

        image = self.coordinator.current_image()
        if image is None or image is self._shown:
            return

        if self._artist is None:
            self._artist = self._ax.imshow(unpack_rgb(image),
                                           interpolation='nearest',
                                           aspect='auto')
        else:
            self._artist.set_data(unpack_rgb(image))
        self._shown = image
        self.fig.canvas.draw_idle()
