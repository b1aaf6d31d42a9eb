"""
Camera scan loop for device identifiers.

grab_frame() returns the next camera frame (or None when no frame is ready);
decode(frame) returns the decoded identifier string or None. The loop checks
its cancellation token before every grab and stops on the first decoded
string or on cancel, so no polling outlives the scan screen.
"""
import logging
import threading

from qc.errors import CameraAccessDenied

logger = logging.getLogger(__name__)


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()

    def wait(self, seconds):
        """Sleep up to `seconds`, waking early on cancel. Returns True if cancelled."""
        return self._event.wait(seconds)


class ScanLoop:
    def __init__(self, grab_frame, decode, interval=0.3, max_frames=None):
        self.grab_frame = grab_frame
        self.decode = decode
        self.interval = interval
        self.max_frames = max_frames
        self.frames_read = 0

    def run(self, token):
        """
        Blocking scan. Returns the decoded identifier, or None if cancelled
        (or max_frames reached). Camera permission/open errors surface as
        CameraAccessDenied.
        """
        logger.info("Camera scanning started")
        try:
            while not token.cancelled:
                if self.max_frames is not None and self.frames_read >= self.max_frames:
                    return None
                try:
                    frame = self.grab_frame()
                except PermissionError as exc:
                    raise CameraAccessDenied() from exc
                self.frames_read += 1

                if frame is not None:
                    code = self.decode(frame)
                    if code:
                        code = str(code).strip()
                        if code:
                            logger.info("Device code decoded after %d frames", self.frames_read)
                            return code

                if self.interval and token.wait(self.interval):
                    break
            return None
        finally:
            token.cancel()
            logger.info("Camera scanning stopped")


class BackgroundScan:
    """Runs a ScanLoop on a daemon thread; stop() cancels and joins it."""

    def __init__(self, loop, on_decoded):
        self.loop = loop
        self.on_decoded = on_decoded
        self.token = CancellationToken()
        self.error = None
        self._thread = None

    def _target(self):
        try:
            code = self.loop.run(self.token)
        except CameraAccessDenied as exc:
            self.error = exc
            return
        if code:
            self.on_decoded(code)

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return False
        self._thread = threading.Thread(target=self._target, daemon=True)
        self._thread.start()
        return True

    def join(self, timeout=None):
        """Wait for the loop to end on its own. Returns True once it has."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        return not self.running

    def stop(self, timeout=2.0):
        self.token.cancel()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()
