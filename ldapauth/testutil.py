"""Utilities for writing Twistedy unit tests of ldapauth."""

from twisted.internet import defer, task
from twisted.python import failure
from zope.interface import implementer

from ldaptor.protocols import pureldap
from ldaptor.protocols.ldap import ldaperrors

from ldapauth import config, interfaces, policy, users


def completeConfig(**kw):
    """
    A valid configuration; keyword arguments override single fields.
    """
    values = dict(
        hostname="ldap://ldap.example.com",
        bindDNFormat="cn={{user id}},ou=people,dc=example,dc=com",
        baseDN="dc=example,dc=com",
        presenterFilter="(&(cn={{user id}})(objectClass=person))",
        clientFilter="(&(cn={{user id}})(objectClass=person))",
    )
    values.update(kw)
    return config.AuthConfig(**values)


def bindSuccess():
    return [pureldap.LDAPBindResponse(resultCode=ldaperrors.Success.resultCode)]


def bindFailure(resultCode=ldaperrors.LDAPInvalidCredentials.resultCode):
    return [pureldap.LDAPBindResponse(resultCode=resultCode)]


def searchEntry(dn, displayName=None, mail=None):
    attributes = []
    if displayName is not None:
        attributes.append(("displayName", [displayName]))
    if mail is not None:
        attributes.append(("mail", [mail]))
    return pureldap.LDAPSearchResultEntry(objectName=dn, attributes=attributes)


def searchDone(resultCode=ldaperrors.Success.resultCode):
    return pureldap.LDAPSearchResultDone(resultCode=resultCode)


@implementer(interfaces.IDirectoryClient)
class DirectoryClientTestDriver:
    """

    A test driver that looks somewhat like a real LDAPClient.

    Pass in a list of lists of LDAPProtocolResponses. For each bind or
    search, the first item of said list is iterated through, and all
    the items are given as responses. The sent LDAP requests are
    stored in self.sent, so you can assert that the sent requests are
    what they are supposed to be.

    It is also possible to include a Failure instance instead of an
    LDAPProtocolResponse, which will cause the errback to be called
    with the failure.
    """

    fakeUnbindResponse = "fake-unbind-by-DirectoryClientTestDriver"

    def __init__(self, *responses):
        self.sent = []
        self.responses = list(responses)
        self.connected = True
        self.unbindCount = 0

    def _response(self):
        assert self.responses, "Ran out of responses"
        return list(self.responses.pop(0))

    def bind(self, dn, auth):
        self.sent.append(pureldap.LDAPBindRequest(dn=dn, auth=auth))
        l = self._response()
        assert len(l) == 1, "got %d responses for a bind" % len(l)
        r = l[0]
        if isinstance(r, failure.Failure):
            return defer.fail(r)
        if r.resultCode != ldaperrors.Success.resultCode:
            return defer.fail(ldaperrors.get(r.resultCode, r.errorMessage))
        return defer.succeed((r.matchedDN, r.serverSaslCreds))

    def send_multiResponse(self, op, handler, *args, **kwargs):
        d = defer.Deferred()
        self.sent.append(op)
        responses = self._response()
        while responses:
            r = responses.pop(0)
            if isinstance(r, failure.Failure):
                d.errback(r)
                break
            ret = handler(r, *args, **kwargs)
            if responses:
                msg = (
                    "got %d responses still to give, "
                    "but handler wants none (got %r)."
                ) % (len(responses), ret)
                assert not ret, msg
            else:
                msg = (
                    "no more responses to give, but handler "
                    "still wants more (got %r)." % ret
                )
                assert ret, msg
        return d

    def unbind(self):
        assert self.connected
        self.sent.append(self.fakeUnbindResponse)
        self.connected = False
        self.unbindCount += 1

    def assertNothingLeft(self):
        msg = "%s still has responses left: %r" % (
            self.__class__.__name__,
            self.responses,
        )
        assert not self.responses, msg


@implementer(interfaces.IDirectoryClientFactory)
class FakeClientFactory:
    """
    Hands out the given clients, one per connect.

    A Failure fails the connect; a Deferred is returned as is, so a
    test can leave a connect hanging.
    """

    def __init__(self, *clients):
        self.clients = list(clients)
        self.hostnames = []

    def connect(self, hostname):
        self.hostnames.append(hostname)
        assert self.clients, "Ran out of clients"
        c = self.clients.pop(0)
        if isinstance(c, failure.Failure):
            return defer.fail(c)
        if isinstance(c, defer.Deferred):
            return c
        return defer.succeed(c)


class RecordingUserStore(users.InMemoryUserStore):
    """
    An in-memory store that remembers every call and can be told to
    fail or to answer signup with something else.
    """

    def __init__(self, users=(), findError=None, signupError=None, signupResult=None):
        super().__init__(users)
        self.lookups = []
        self.signups = []
        self.findError = findError
        self.signupError = signupError
        self.signupResult = signupResult

    def findUserByName(self, name):
        self.lookups.append(name)
        if self.findError is not None:
            return defer.fail(self.findError)
        return super().findUserByName(name)

    def signup(self, user):
        self.signups.append(user)
        if self.signupError is not None:
            return defer.fail(self.signupError)
        d = super().signup(user)
        if self.signupResult is not None:
            d.addCallback(lambda _: self.signupResult)
        return d


def createAuthenticator(*responses, **kw):
    """
    Create an LDAPAuthenticator talking to a single
    DirectoryClientTestDriver.

    :param responses: The responses to initialize the driver.
    :param users: Local accounts the store starts with.
    :param store: A store to use instead of a RecordingUserStore.
    :param config: Configuration; defaults to L{completeConfig}.
    """
    client = DirectoryClientTestDriver(*responses)
    factory = FakeClientFactory(client)
    store = kw.pop("store", None)
    if store is None:
        store = RecordingUserStore(kw.pop("users", ()))
    cfg = kw.pop("config", None)
    if cfg is None:
        cfg = completeConfig()
    clock = kw.pop("clock", None)
    if clock is None:
        clock = task.Clock()
    authenticator = policy.LDAPAuthenticator(
        store, cfg, clientFactory=factory, reactor=clock
    )
    authenticator.client = client
    authenticator.factory = factory
    authenticator.store = store
    authenticator.clock = clock
    return authenticator
