"""
The lifecycle of one connection to the directory: validate the
configuration, connect, bind as the user, disconnect.

A DirectoryConnection belongs to a single authentication attempt.
Attempts never share one, so one attempt's disconnect cannot tear
down a connection another attempt is still using.
"""

from urllib.parse import urlsplit

from twisted.internet import defer
from twisted.internet.endpoints import quoteStringArgument
from twisted.python import log
from zope.interface import implementer

from ldaptor.protocols.ldap import ldapclient, ldapconnector

from ldapauth import config, errors, interfaces

DISCONNECTED = "disconnected"
CONNECTING = "connecting"
CONNECTED = "connected"

DEFAULT_PORTS = {
    "ldap": 389,
    "ldaps": 636,
}


class UnsupportedURL(ValueError):
    """LDAP host must be an ldap:// or ldaps:// URL"""

    def __init__(self, url):
        ValueError.__init__(self, url)
        self.url = url

    def __str__(self):
        return "%s: %r" % (self.__doc__, self.url)


def endpointFromURL(url):
    """
    Turn an LDAP URL into a Twisted client endpoint description.

    ldaps:// connects with TLS; a bare host name means ldap://.
    """
    if "://" not in url:
        url = "ldap://" + url
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parts.hostname:
        raise UnsupportedURL(url)
    try:
        port = parts.port
    except ValueError:
        raise UnsupportedURL(url)
    if port is None:
        port = DEFAULT_PORTS[scheme]

    kind = "tls" if scheme == "ldaps" else "tcp"
    return "%s:host=%s:port=%d" % (kind, quoteStringArgument(parts.hostname), port)


@implementer(interfaces.IDirectoryClientFactory)
class LDAPClientFactory:
    """
    Connects ldaptor LDAPClients over Twisted endpoints.
    """

    def __init__(self, reactor=None, clientProtocol=ldapclient.LDAPClient):
        if reactor is None:
            from twisted.internet import reactor
        self.reactor = reactor
        self.clientProtocol = clientProtocol

    def connect(self, hostname):
        endpointStr = endpointFromURL(hostname)
        return ldapconnector.connectToLDAPEndpoint(
            self.reactor, endpointStr, self.clientProtocol
        )


class DirectoryConnection:
    """
    Owns at most one live directory client at a time.

    The configuration is the snapshot taken when the attempt started;
    it is never re-read from shared state.
    """

    def __init__(self, cfg, clientFactory, reactor=None):
        if reactor is None:
            from twisted.internet import reactor
        self.config = cfg
        self.clientFactory = clientFactory
        self.reactor = reactor
        self.client = None
        self.state = DISCONNECTED

    def timed(self, d):
        """
        Fail C{d} with L{defer.TimeoutError} if it has not fired
        within the configured timeout.
        """
        timeout = getattr(self.config, "timeout", None)
        if timeout:
            d.addTimeout(timeout, self.reactor)
        return d

    def connect(self):
        """
        Validate the configuration and open a connection.

        A bad configuration is logged, not raised: the Deferred fires
        with None and we stay disconnected.
        """
        problems = config.validateConfig(self.config)
        if problems:
            log.msg("LDAP configuration error, connect() aborted:")
            for problem in problems:
                log.msg("* %s" % problem)
            self.disconnect()
            return defer.succeed(None)

        self.disconnect()
        self.state = CONNECTING
        d = self.timed(
            defer.maybeDeferred(self.clientFactory.connect, self.config.hostname)
        )
        d.addCallbacks(self._connected, self._connectFailed)
        return d

    def _connected(self, client):
        self.client = client
        self.state = CONNECTED
        log.msg("LDAP client connected to %s" % self.config.hostname)
        return client

    def _connectFailed(self, reason):
        self.state = DISCONNECTED
        log.msg(
            "LDAP connection to %s failed: %s"
            % (self.config.hostname, reason.getErrorMessage())
        )
        return reason

    def disconnect(self):
        """
        Close the connection if there is one. Safe to call at any time.
        """
        client, self.client = self.client, None
        self.state = DISCONNECTED
        if client is None:
            return
        log.msg("LDAP client disconnecting")
        if getattr(client, "connected", True):
            client.unbind()

    def bind(self, credentials):
        """
        (Re)connect and bind as the user named by C{credentials}.

        @param credentials: IUsernamePassword, or None

        @return: Deferred that fires with None on success, or fails
        with L{errors.MissingConnection}, L{errors.BadCredentials}, or
        whatever the directory reported.
        """
        d = self.connect()
        d.addCallback(self._bind, credentials)
        return d

    def _bind(self, _, credentials):
        if self.client is None:
            raise errors.MissingConnection()
        username = getattr(credentials, "username", None)
        password = getattr(credentials, "password", None)
        if not username or not password:
            raise errors.BadCredentials()

        dn = self.config.getBindDN(username)
        d = self.timed(defer.maybeDeferred(self.client.bind, dn, password))
        d.addCallback(lambda _: None)
        return d
