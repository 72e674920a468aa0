from serpnav.settings import RunConfig


class FakeSession:
    """In-memory BrowserSession: scripted links, JSON-LD blocks and failures."""

    def __init__(self, config: RunConfig, user_agent: str | None = None, links=None, ld_json=None, fail_on=None, title="Target page"):
        self.config = config
        self.user_agent = user_agent
        self.links = list(links or [])
        self.ld_json = list(ld_json or [])
        self.fail_on = fail_on or {}
        self._title = title
        self.calls: list[tuple] = []
        self.opened = False
        self.close_count = 0

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise self.fail_on[name]

    async def open(self):
        self._record("open")
        self.opened = True

    async def navigate(self, url):
        self._record("navigate", url)

    async def wait_for_idle(self):
        self._record("wait_for_idle")

    async def find_links(self, substring):
        self._record("find_links", substring)
        return [href for href in self.links if substring in href]

    async def click_and_wait(self, href):
        self._record("click_and_wait", href)

    async def screenshot(self, path):
        self._record("screenshot", path)

    async def evaluate(self, script, arg=None):
        self._record("evaluate")
        return list(self.ld_json)

    async def title(self):
        self._record("title")
        return self._title

    async def close(self):
        self.calls.append(("close",))
        self.close_count += 1


class SessionRecorder:
    """Session factory that hands out FakeSessions and keeps every one it made."""

    def __init__(self, **session_kwargs):
        self.session_kwargs = session_kwargs
        self.sessions: list[FakeSession] = []

    def __call__(self, config, user_agent=None):
        session = FakeSession(config, user_agent, **self.session_kwargs)
        self.sessions.append(session)
        return session


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)
