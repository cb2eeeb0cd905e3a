"""Render coordinator running on the root participant.

The coordinator owns the render state machine

    IDLE --request_render--> PENDING_OR_ACTIVE --image published--> IDLE
    IDLE | PENDING_OR_ACTIVE --request_shutdown--> SHUTTING_DOWN

and the viewport.  The display surface talks to it from its own thread:
it may change the viewport only while the coordinator is IDLE, and it reads
finished images through current_image().  State, viewport and image are
guarded by one condition variable, which is also what the render loop
sleeps on between requests.
"""

import enum
import threading
import time

from mandelbrot_mpi import config
from mandelbrot_mpi.fractal import viewport as viewports
from mandelbrot_mpi.fractal.escape_time import color_palette
from mandelbrot_mpi.mandelbrot_exceptions import CommunicationFailure
from mandelbrot_mpi.mandelbrot_exceptions import RenderInProgress
from mandelbrot_mpi.parallel.protocol import broadcast_viewport
from mandelbrot_mpi.parallel.protocol import broadcast_shutdown
from mandelbrot_mpi.parallel.protocol import render_partition
import mandelbrot_mpi.utilities.log as log


class RenderState(enum.Enum):
    IDLE = 'idle'
    PENDING_OR_ACTIVE = 'pending_or_active'
    SHUTTING_DOWN = 'shutting_down'


def render_cycle(channel, viewport, max_iter=config.max_iterations,
                 palette=None):
    """One full render as seen from the root: broadcast, own rows, gather.

    Returns the assembled (height, width) image.
    """

    broadcast_viewport(channel, viewport)
    return render_partition(channel, viewport, max_iter, palette)


class RenderCoordinator(object):
    """Drive renders across a channel whose root is this participant.

    on_image, if given, is called from the render thread with every newly
    published image, before the coordinator returns to IDLE.
    """

    def __init__(self, channel, viewport=None,
                 max_iter=config.max_iterations, on_image=None):

        if channel.rank != channel.root:
            raise ValueError('The coordinator must run on the root, '
                             'P%d is not P%d' % (channel.rank, channel.root))

        if viewport is None:
            viewport = viewports.default_viewport()

        self.channel = channel
        self.max_iter = max_iter
        self.on_image = on_image

        self._palette = color_palette(max_iter)
        self._cond = threading.Condition()
        self._state = RenderState.IDLE
        self._viewport = viewports.validate_viewport(viewport)
        self._render_viewport = None
        self._image = None
        self._sentinel_sent = False
        self._thread = None

        self.renders = 0
        self.failure = None

    #--------------------------------------------------------------------------
    # Queries, safe from any thread
    #--------------------------------------------------------------------------
    @property
    def state(self):
        with self._cond:
            return self._state

    @property
    def viewport(self):
        with self._cond:
            return self._viewport

    def render_in_progress(self):
        return self.state is RenderState.PENDING_OR_ACTIVE

    def current_image(self):
        """Latest published image, read-only, or None before the first."""

        with self._cond:
            return self._image

    def wait_until_idle(self, timeout=None):
        """Block until no render is pending.  Returns False on timeout."""

        with self._cond:
            return self._cond.wait_for(
                lambda: self._state is not RenderState.PENDING_OR_ACTIVE,
                timeout)

    #--------------------------------------------------------------------------
    # Requests from the display surface
    #--------------------------------------------------------------------------
    def request_render(self):
        """Ask for a render of the current viewport.

        Returns False, and changes nothing, unless the coordinator is IDLE:
        a request made while a render is pending is already covered by it.
        """

        with self._cond:
            if self._state is not RenderState.IDLE:
                return False
            self._begin_render()
            return True

    def request_shutdown(self):
        """Stop after any render already running; pending ones are dropped."""

        with self._cond:
            if self._state is not RenderState.SHUTTING_DOWN:
                log.info('Shutdown requested in state %s' % self._state.value)
                self._state = RenderState.SHUTTING_DOWN
                self._cond.notify_all()

    on_shutdown_requested = request_shutdown

    def on_viewport_changed(self, bounds, resolution):
        """Apply new bounds and resolution and render them.

        Returns False if a render is in progress, in which case the
        viewport is left as it was.  Invalid input raises InvalidViewport.
        """

        viewport = viewports.make_viewport(bounds, resolution)

        with self._cond:
            if self._state is not RenderState.IDLE:
                return False
            self._viewport = viewport
            self._begin_render()
            return True

    def set_viewport(self, viewport):
        viewport = viewports.validate_viewport(viewport)
        with self._cond:
            self._check_idle()
            self._viewport = viewport

    def pan(self, dx_steps=0, dy_steps=0):
        with self._cond:
            self._check_idle()
            self._viewport = viewports.pan(self._viewport, dx_steps, dy_steps)

    def zoom(self, factor):
        with self._cond:
            self._check_idle()
            self._viewport = viewports.zoom(self._viewport, factor)

    def resize(self, width, height):
        with self._cond:
            self._check_idle()
            self._viewport = viewports.resize(self._viewport, width, height)

    def _check_idle(self):
        if self._state is not RenderState.IDLE:
            raise RenderInProgress('Viewport is locked while %s'
                                   % self._state.value)

    def _begin_render(self):
        # Caller holds self._cond.  The snapshot taken here is what gets
        # broadcast, whatever happens to self._viewport afterwards.
        self._state = RenderState.PENDING_OR_ACTIVE
        self._render_viewport = self._viewport
        self._cond.notify_all()

    #--------------------------------------------------------------------------
    # Render loop
    #--------------------------------------------------------------------------
    def run(self):
        """Serve requests until shutdown.

        Sleeps on the condition variable while IDLE.  Returns once the
        shutdown sentinel has been broadcast, or after a communication
        failure during a render, which is kept in self.failure.  Any other
        exception, a failed sentinel broadcast included, is also kept in
        self.failure and leaves the coordinator SHUTTING_DOWN before it
        propagates.
        """

        log.info('Coordinator running on %r' % self.channel)

        try:
            self._serve()
        except Exception as e:
            log.critical('Render loop stopped: %s' % e)
            with self._cond:
                if self.failure is None:
                    self.failure = e
                self._state = RenderState.SHUTTING_DOWN
                self._cond.notify_all()
            raise

    def _serve(self):
        while True:
            with self._cond:
                while self._state is RenderState.IDLE:
                    self._cond.wait()
                state = self._state
                viewport = self._render_viewport

            if state is RenderState.SHUTTING_DOWN:
                self._send_shutdown()
                return

            if not self._render(viewport):
                return

    def _run_thread(self):
        try:
            self.run()
        except Exception:
            # Already in self.failure; raised again by whoever joins
            pass

    def start(self):
        """Run the render loop on a dedicated thread.

        An exception ending the loop does not escape the thread.  Check
        self.failure after join().
        """

        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError('Render loop already running')

        self._thread = threading.Thread(target=self._run_thread,
                                        name='render-coordinator',
                                        daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)
            return not self._thread.is_alive()
        return True

    def render_once(self, viewport=None):
        """Render synchronously on the calling thread and return the image.

        For headless use when the render loop is not running.
        """

        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError('render_once cannot be mixed with the '
                               'render loop thread')

        if viewport is not None:
            self.set_viewport(viewport)

        with self._cond:
            self._check_idle()
            self._begin_render()
            snapshot = self._render_viewport

        if not self._render(snapshot):
            raise self.failure
        return self.current_image()

    def _render(self, viewport):
        """Run one render cycle and publish it.  False if the group broke."""

        t0 = time.time()
        try:
            image = render_cycle(self.channel, viewport, self.max_iter,
                                 self._palette)
        except CommunicationFailure as e:
            log.critical('Render of %dx%d abandoned: %s'
                         % (viewport.width, viewport.height, e))
            with self._cond:
                self.failure = e
                # The group is out of step, a sentinel would never be matched
                self._sentinel_sent = True
                self._state = RenderState.SHUTTING_DOWN
                self._cond.notify_all()
            return False

        image.setflags(write=False)
        elapsed = (time.time() - t0) * 1000.0
        log.info('MPI Render (%dx%d on %d procs): %d ms'
                 % (viewport.width, viewport.height, self.channel.size,
                    elapsed))

        with self._cond:
            self._image = image
            self.renders += 1

        try:
            if self.on_image is not None:
                self.on_image(image)
        finally:
            with self._cond:
                if self._state is RenderState.PENDING_OR_ACTIVE:
                    self._state = RenderState.IDLE
                self._cond.notify_all()

        return True

    def _send_shutdown(self):
        with self._cond:
            if self._sentinel_sent:
                return
            self._sentinel_sent = True

        log.info('Coordinator sending shutdown signal to %d workers'
                 % (self.channel.size - 1))
        try:
            broadcast_shutdown(self.channel)
        except CommunicationFailure as e:
            log.critical('Shutdown broadcast failed: %s' % e)
            with self._cond:
                self.failure = e
            raise
