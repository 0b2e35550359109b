import threading
import time


class SharedState:
    """
    Singleton class to share state between the frame loop and the
    FastAPI server. The web layer only reads engine snapshots through it.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance.context = None
                    cls._instance.context_lock = threading.Lock()
                    cls._instance.system_stats = {
                        "start_time": 0,
                        "last_frame_ts": None,
                        "frames_processed": 0,
                    }
        return cls._instance

    def set_context(self, ctx):
        with self.context_lock:
            self.context = ctx

    def get_context(self):
        with self.context_lock:
            return self.context

    def mark_frame(self):
        """Record that the pipeline processed a frame."""
        self.system_stats["last_frame_ts"] = time.time()
        self.system_stats["frames_processed"] = self.system_stats.get("frames_processed", 0) + 1

    def update_system_stats(self, stats):
        self.system_stats.update(stats)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        return dict(self.system_stats)


# Global instance
state = SharedState()
