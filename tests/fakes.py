import io
import json
import subprocess
import zipfile

import requests


class FakeResponse:
    """Just enough of requests.Response for the client and the server manager."""

    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content
        self.closed = False

    def json(self):
        return json.loads(self.content)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """
    Maps URLs to canned answers. An answer is a FakeResponse, an exception
    instance (raised), or a list of those consumed one call at a time
    (the last one repeats).
    """

    def __init__(self, answers=None):
        self.answers = dict(answers or {})
        self.calls = []

    def _answer(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        if url not in self.answers:
            raise requests.ConnectionError(f"nothing listening at {url}")
        answer = self.answers[url]
        if isinstance(answer, list):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get(self, url, **kwargs):
        return self._answer("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._answer("POST", url, kwargs)

    def urls(self, method=None):
        return [url for m, url, _ in self.calls if method is None or m == method]


class FakeProcess:
    def __init__(self, command, cwd=None, pid=4242):
        self.command = command
        self.cwd = cwd
        self.pid = pid
        self.returncode = None
        self.terminated = False
        self.killed = False
        self.ignore_terminate = False

    def poll(self):
        return self.returncode

    def terminate(self):
        self.terminated = True
        if not self.ignore_terminate:
            self.returncode = -15

    def kill(self):
        self.killed = True
        self.returncode = -9

    def wait(self, timeout=None):
        if self.returncode is None:
            raise subprocess.TimeoutExpired(self.command, timeout)
        return self.returncode


class FakeProcessFactory:
    """Stands in for subprocess.Popen and remembers every spawned process."""

    def __init__(self):
        self.processes = []

    def __call__(self, command, cwd=None):
        process = FakeProcess(command, cwd=cwd, pid=1000 + len(self.processes))
        self.processes.append(process)
        return process


def brouter_zip(version="1.7.7"):
    """In-memory distribution archive shaped like the real one."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(f"brouter-{version}/brouter-{version}-all.jar", b"PK fake jar")
        archive.writestr(f"brouter-{version}/profiles2/trekking.brf", b"---context:global\n")
    return buffer.getvalue()


GPX_ONE_ROUTE = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx xmlns="http://www.topografix.com/GPX/1/1" version="1.1" creator="BRouter-1.7.7">
  <rte>
    <name>My Route</name>
    <rtept lat="52.52" lon="13.405"><ele>34.0</ele></rtept>
    <rtept lat="52.53" lon="13.415"><ele>36.5</ele></rtept>
    <rtept lat="48.8566" lon="2.3522"><ele>35.0</ele></rtept>
  </rte>
</gpx>
"""
