from twisted.internet import defer
from twisted.python.failure import Failure

from ldaptor import ldapfilter
from ldaptor.protocols import pureldap
from ldaptor.protocols.ldap import ldaperrors

from ldapauth import config, errors
from ldapauth.users import DirectoryUserRecord

ATTRIBUTES = ("displayName", "mail")


class _SearchCollector:
    """
    Folds the responses to one search request into a single result.

    Entries overwrite the record, the first error is latched, and the
    result fires once: on the done message, or straight away when the
    stream itself fails since no done message will follow.
    """

    def __init__(self, record):
        self.record = record
        self.failure = None
        self.deferred = defer.Deferred()

    def handle(self, msg):
        if isinstance(msg, pureldap.LDAPSearchResultEntry):
            self.record.update(msg.attributes)
            return False
        elif isinstance(msg, pureldap.LDAPSearchResultReference):
            return False
        elif isinstance(msg, pureldap.LDAPSearchResultDone):
            e = ldaperrors.get(msg.resultCode, msg.errorMessage)
            if not isinstance(e, ldaperrors.Success):
                self._latch(Failure(e))
            self._finish()
            return True
        else:
            self._latch(
                Failure(ldaperrors.LDAPProtocolError("bad search response: %r" % msg))
            )
            self._finish()
            return True

    def error(self, reason):
        self._latch(reason)
        self._finish()
        # the failure travels on through self.deferred

    def _latch(self, reason):
        if self.failure is None:
            self.failure = reason

    def _finish(self):
        if self.deferred.called:
            return
        if self.failure is not None:
            self.deferred.errback(self.failure)
        else:
            self.deferred.callback(self.record)


class DirectorySearch:
    """
    Looks up the display name and email of a user over a bound
    L{connector.DirectoryConnection}.
    """

    def __init__(self, connection):
        self.connection = connection

    def search(self, credentials, filterTemplate):
        """
        Search the whole subtree under the base DN with C{filterTemplate},
        the user id filled in.

        @return: Deferred DirectoryUserRecord. The record is empty,
        not None, when nothing matched.
        """
        client = self.connection.client
        if client is None:
            return defer.fail(errors.MissingConnection())

        username = credentials.username
        record = DirectoryUserRecord(username=username)
        collector = _SearchCollector(record)
        try:
            op = pureldap.LDAPSearchRequest(
                baseObject=self.connection.config.baseDN,
                scope=pureldap.LDAP_SCOPE_wholeSubtree,
                derefAliases=pureldap.LDAP_DEREF_neverDerefAliases,
                sizeLimit=0,
                timeLimit=0,
                typesOnly=0,
                filter=ldapfilter.parseFilter(
                    config.substituteFilter(filterTemplate, username)
                ),
                attributes=ATTRIBUTES,
            )
            dsend = client.send_multiResponse(op, collector.handle)
        except Exception:
            return defer.fail()

        dsend.addErrback(collector.error)
        return self.connection.timed(collector.deferred)
