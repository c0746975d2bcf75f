#!/usr/bin/env python3
"""Keep a console server running inside a daily time window.

The supervisor launches the configured server command with a piped stdin,
warns players before the window closes, sends ``stop`` once it has closed and
restarts the server if it dies while it should be up.  Status messages go to
a Discord webhook when one is configured.

    python supervisor.py --config config.toml

Pair it with ``mock_server.py`` to try the whole cycle without a real server.
"""

import argparse
import asyncio
import logging
import shlex
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from components.config import ConfigError, WardenConfig, load_config
from components.config_watcher import ConfigWatcher
from components.crash_guard import CrashWatchdog
from components.notifier import DiscordNotifier
from components.schedule import ScheduleWindow
from components.shutdown_notices import ShutdownNotices

logger = logging.getLogger("supervisor")

STOP_COMMAND = "stop"

SpawnFn = Callable[[List[str]], Awaitable[asyncio.subprocess.Process]]


async def create_server(command: List[str]) -> asyncio.subprocess.Process:
    """Spawn the server with a piped stdin; its console output stays on ours."""

    return await asyncio.create_subprocess_exec(
        *command,
        stdin=asyncio.subprocess.PIPE,
    )


async def send_command(
    proc: asyncio.subprocess.Process,
    text: str,
    *,
    encoding: str = "utf-8",
) -> bool:
    """Write ``text`` as one line to the server console."""

    if proc.stdin is None or proc.returncode is not None:
        return False
    try:
        proc.stdin.write(f"{text}\n".encode(encoding, errors="replace"))
        await proc.stdin.drain()
    except (BrokenPipeError, ConnectionResetError) as exc:
        logger.debug("Could not deliver %r to PID %s: %s", text, proc.pid, exc)
        return False
    logger.info("Sent to server: %s", text)
    return True


async def _terminate_child(proc: asyncio.subprocess.Process, *, timeout: float = 5.0) -> None:
    """Terminate the server process, escalating to a kill if needed."""

    if proc.returncode is not None:
        return

    logger.warning("Terminating server PID %s", proc.pid)
    try:
        proc.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("Server killed after timeout (code %s)", proc.returncode)


async def stop_server(proc: asyncio.subprocess.Process, *, timeout: float) -> Optional[int]:
    """Ask the server to stop and wait for it to exit."""

    await send_command(proc, STOP_COMMAND)
    try:
        await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Server did not exit %.0fs after %r", timeout, STOP_COMMAND)
        await _terminate_child(proc)
    logger.info("Server exited with code %s", proc.returncode)
    return proc.returncode


class Supervisor:
    """Reconcile the server process with the schedule, one tick at a time."""

    def __init__(
        self,
        config: WardenConfig,
        *,
        notifier: Optional[DiscordNotifier] = None,
        watchdog: Optional[CrashWatchdog] = None,
        notices: Optional[ShutdownNotices] = None,
        spawn: SpawnFn = create_server,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.notifier = notifier or DiscordNotifier(config.discord_webhook_url)
        self.watchdog = watchdog or CrashWatchdog()
        self.notices = notices or ShutdownNotices()
        self.spawn = spawn
        self.clock = clock
        self.process: Optional[asyncio.subprocess.Process] = None
        self._reload_requested = False
        self._gave_up = False

    @property
    def window(self) -> ScheduleWindow:
        return ScheduleWindow(self.config.start_time, self.config.end_time)

    @property
    def is_alive(self) -> bool:
        return self.process is not None and self.process.returncode is None

    # ------------------------------------------------------------------
    # Config reload
    # ------------------------------------------------------------------
    def request_reload(self) -> None:
        self._reload_requested = True

    def _apply_pending_reload(self) -> None:
        if not self._reload_requested:
            return
        self._reload_requested = False
        if self.config.source is None:
            logger.warning("Reload requested but the config has no source file")
            return
        try:
            config = load_config(self.config.source)
        except ConfigError as exc:
            logger.warning("Ignoring invalid config update: %s", exc)
            return
        self.config = config
        self.notifier.webhook_url = config.discord_webhook_url
        logger.info("Reloaded config: window %s", self.window)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    async def tick(self, now: datetime) -> float:
        """Run one reconciliation step and return the seconds until the next."""

        self._apply_pending_reload()
        in_window = self.window.contains(now.time())

        if not self.is_alive:
            if self.process is not None:
                logger.info("Server process exited with code %s", self.process.returncode)
                self.process = None
            if not in_window:
                return self.config.check_interval
            if not self.watchdog.allows_restart(now):
                if not self._gave_up:
                    self._gave_up = True
                    logger.error(
                        "Watchdog: Too many crashes (%d in %s). Stopping auto-restart.",
                        self.watchdog.limit,
                        self.watchdog.window,
                    )
                    await self.notifier.send(
                        f"Watchdog: Server crashed {self.watchdog.limit} times. Giving up."
                    )
                return self.watchdog.cooldown
            await self._start(now)
            return self.config.check_interval

        if not in_window:
            logger.info("Time to stop. Stopping server...")
            await self.notifier.send("Stopping server (schedule)...")
            await self._stop()
            return self.config.check_interval

        minutes_left = self.window.minutes_left(now.time())
        command = self.notices.due(minutes_left)
        if command is not None and await send_command(self.process, command):
            self.notices.mark_sent(minutes_left)
        return self.config.check_interval

    async def _start(self, now: datetime) -> None:
        command = self.config.server_command
        logger.info("Starting server: %s", shlex.join(command))
        await self.notifier.send("Starting server...")
        self.watchdog.record_start(now)
        try:
            self.process = await self.spawn(command)
        except OSError as exc:
            logger.error("Failed to start: %s", exc)
            return
        self._gave_up = False
        self.notices.reset()
        logger.info("Started server PID %s", self.process.pid)

    async def _stop(self) -> None:
        proc, self.process = self.process, None
        if proc is not None:
            await stop_server(proc, timeout=self.config.stop_timeout)

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Tick until ``stop_event`` is set, then stop the server."""

        stop_event = stop_event or asyncio.Event()
        logger.info("Supervising %s during %s", shlex.join(self.config.server_command), self.window)
        await self.notifier.send("Server warden started.")

        try:
            while not stop_event.is_set():
                delay = await self.tick(self.clock())
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        if self.is_alive:
            logger.info("Shutting down, stopping server PID %s", self.process.pid)
            await self.notifier.send("Stopping server (warden shutdown)...")
        await self._stop()


async def _serve(supervisor: Supervisor, *, watch_config: bool) -> None:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def handle_signal(*_args) -> None:
        logger.info("received interrupt, shutting down")
        stop_event.set()

    try:
        loop.add_signal_handler(signal.SIGINT, handle_signal)
        loop.add_signal_handler(signal.SIGTERM, handle_signal)
    except NotImplementedError:
        # Signals not available (e.g., on Windows)
        pass

    watcher: Optional[ConfigWatcher] = None
    if watch_config and supervisor.config.source is not None:
        watcher = ConfigWatcher(supervisor.config.source, supervisor.request_reload)
        watcher.start(loop)

    try:
        await supervisor.run(stop_event)
    finally:
        if watcher is not None:
            watcher.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a console server on a daily schedule")
    parser.add_argument("--config", default="config.toml", help="Path to the TOML config file")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument(
        "--no-watch-config",
        dest="watch_config",
        action="store_false",
        help="Do not reload the config file when it changes",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        raise SystemExit(str(exc))

    supervisor = Supervisor(config)
    try:
        asyncio.run(_serve(supervisor, watch_config=args.watch_config))
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)


if __name__ == "__main__":
    main()
