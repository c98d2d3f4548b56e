"""
ASR Callback - Base class for streaming session callbacks

Subclass AsrCallback to receive events from a StreamingSession.
"""

from abc import ABC
from typing import List

from .result import RecognitionResult


class AsrCallback(ABC):
    """
    Base class for streaming session callbacks.

    ## Callback Chain (Call Order)

    ```
      StreamingSession(...)
         |
         v
      on_open()              <- Session started, stream created
         |
         v
      process() ---------> on_event()  <- Partial text changed, or endpoint
         |                     |
         |                     +- is_final=False: Intermediate result
         |                     +- is_final=True:  Final result (endpoint)
         v
      finish()
         |
         v
      on_event() / on_complete()   <- Tail result, recognition completed
         |
         v
      close()
         |
         v
      on_close()             <- Stream destroyed
    ```

    ## Error Handling

    If an engine call raises inside process() or finish():
    ```
      on_open() -> ... -> on_error() -> (exception propagates)
    ```
    on_close() still follows when the session is closed.

    ## Thread Safety

    Callbacks run synchronously on the thread driving the session.

    Example:
        class MyCallback(AsrCallback):
            def on_event(self, result):
                if result.is_final:
                    print(f"Final: {result.text}")
                else:
                    print(f"Partial: {result.text}", end='\\r')

        with StreamingSession.open(config, callback=MyCallback()) as session:
            for chunk in chunks:
                session.process(16000, chunk)
            session.finish()
    """

    def on_open(self) -> None:
        """Called once the session owns a live stream."""
        pass

    def on_event(self, result: RecognitionResult) -> None:
        """
        Called when a recognition result is available.

        Args:
            result: Partial (is_final=False) or final (is_final=True) result
        """
        pass

    def on_complete(self) -> None:
        """Called after finish() drained the stream, before on_close()."""
        pass

    def on_error(self, error: Exception) -> None:
        """
        Called when an engine call fails during process() or finish().

        Args:
            error: The exception about to propagate
        """
        pass

    def on_close(self) -> None:
        """
        Called when the session is closed.

        This is always the last callback.
        """
        pass


class PrintCallback(AsrCallback):
    """
    Simple callback that prints all events to console.

    Useful for debugging and quick testing.
    """

    def __init__(self, prefix: str = "[ASR]"):
        """
        Create print callback.

        Args:
            prefix: Prefix for each print statement
        """
        self.prefix = prefix

    def on_open(self) -> None:
        print(f"{self.prefix} Session opened")

    def on_event(self, result: RecognitionResult) -> None:
        status = "Final" if result.is_final else "Partial"
        print(f"{self.prefix} {status}: {result.text}")

    def on_complete(self) -> None:
        print(f"{self.prefix} Recognition complete")

    def on_error(self, error: Exception) -> None:
        print(f"{self.prefix} Error: {error}")

    def on_close(self) -> None:
        print(f"{self.prefix} Session closed")


class CollectCallback(AsrCallback):
    """
    Callback that collects all results into a list.

    Example:
        callback = CollectCallback()
        # ... stream audio ...
        print(callback.results)
        print(callback.get_text())
    """

    def __init__(self):
        self.results: List[RecognitionResult] = []
        self.errors: List[Exception] = []
        self.events: List[str] = []
        self._is_open = False
        self._is_complete = False

    def on_open(self) -> None:
        self.events.append("open")
        self._is_open = True
        self.results = []
        self.errors = []

    def on_event(self, result: RecognitionResult) -> None:
        self.events.append("event")
        self.results.append(result)

    def on_complete(self) -> None:
        self.events.append("complete")
        self._is_complete = True

    def on_error(self, error: Exception) -> None:
        self.events.append("error")
        self.errors.append(error)

    def on_close(self) -> None:
        self.events.append("close")
        self._is_open = False

    def get_text(self) -> str:
        """Get all final text concatenated."""
        return " ".join(r.text for r in self.get_final_results() if r.text)

    def get_final_results(self) -> List[RecognitionResult]:
        """Get only final results."""
        return [r for r in self.results if r.is_final]

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_complete(self) -> bool:
        """True if recognition completed normally."""
        return self._is_complete

    @property
    def has_errors(self) -> bool:
        """True if errors occurred."""
        return len(self.errors) > 0

