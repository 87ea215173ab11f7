from dashboard.services.backend import BackendError, CareBackendClient


class FakeBackend(CareBackendClient):
    """Answers care backend calls from a route table and records them.

    A route value may be a payload, a :class:`BackendError` to raise, or
    a callable receiving the call's keyword arguments.
    """

    def __init__(self):
        super().__init__('http://care.test', token='', timeout=1)
        self.routes = {}
        self.calls = []

    def on(self, method, path, response):
        self.routes[(method, path)] = response
        return self

    def request(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs))
        try:
            response = self.routes[(method, path)]
        except KeyError:
            raise BackendError(f'no route for {method} {path}', status_code=404)
        if isinstance(response, BackendError):
            raise response
        if callable(response):
            return response(**kwargs)
        return response

    def called(self, method, path):
        return [c for c in self.calls if c[0] == method and c[1] == path]


