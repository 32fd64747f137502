"""
The presenter and client authentication flows.

Presenters may fall back to the host's local authentication: a bind
the directory rejects, or a presenter filter that does not match,
gives a result of None rather than an error. Clients have no such
fallback; every failure is an error.

Either way the directory connection is closed exactly once when the
attempt ends.
"""

from twisted.python import log
from zope.interface import implementer

from ldaptor.protocols.ldap import ldaperrors

from ldapauth import connector, interfaces, users
from ldapauth.search import DirectorySearch


@implementer(interfaces.IAuthenticator)
class LDAPAuthenticator:
    def __init__(self, userStore, cfg=None, clientFactory=None, reactor=None):
        if reactor is None:
            from twisted.internet import reactor
        self.reactor = reactor
        self.config = cfg
        if clientFactory is None:
            clientFactory = connector.LDAPClientFactory(reactor)
        self.clientFactory = clientFactory
        self.reconciler = users.LocalUserReconciler(userStore)

    def setConfig(self, cfg):
        """Replace the configuration used by attempts started from now on."""
        self.config = cfg

    def _connection(self):
        return connector.DirectoryConnection(
            self.config, self.clientFactory, self.reactor
        )

    def _disconnect(self, result, connection):
        connection.disconnect()
        return result

    # Presenters

    def presenterAuth(self, credentials):
        connection = self._connection()
        d = connection.bind(credentials)
        d.addCallbacks(
            self._presenterBound,
            self._presenterBindFailed,
            callbackArgs=(connection, credentials),
        )
        d.addBoth(self._disconnect, connection)
        return d

    def _presenterBindFailed(self, reason):
        if reason.check(ldaperrors.LDAPInvalidCredentials):
            log.msg("Unable to authenticate via LDAP - falling back to local auth")
            return None
        log.msg(
            "Unable to authenticate via LDAP due to errors: %s"
            % reason.getErrorMessage()
        )
        return reason

    def _presenterBound(self, _, connection, credentials):
        log.msg("LDAP authentication successful")
        localName = users.localUsername(credentials.username)
        d = self.reconciler.find(localName)
        d.addCallback(self._presenterLookedUp, connection, credentials, localName)
        return d

    def _presenterLookedUp(self, user, connection, credentials, localName):
        # A local account wins even if the presenter filter would not match.
        if user is not None:
            return user

        search = DirectorySearch(connection)
        d = search.search(credentials, connection.config.presenterFilter)
        d.addCallback(self._presenterFound, localName)
        return d

    def _presenterFound(self, record, localName):
        if record.isEmpty():
            log.msg(
                "LDAP user %s does not match the presenter filter"
                " - falling back to local auth" % record.username
            )
            return None
        candidate = users.LocalUser.fromDirectoryRecord(localName, record)
        log.msg("LDAP read successful - attempting to import: %r" % candidate)
        return self.reconciler.importUser(candidate)

    # Clients

    def clientAuth(self, credentials):
        connection = self._connection()
        d = connection.bind(credentials)
        d.addCallback(self._clientBound, connection, credentials)
        d.addBoth(self._disconnect, connection)
        return d

    def _clientBound(self, _, connection, credentials):
        log.msg("LDAP authentication successful")
        search = DirectorySearch(connection)
        return search.search(credentials, connection.config.clientFilter)
