"""
Directory user records, local accounts, and the decisions about when
to look up or import a local account.
"""

from twisted.internet import defer
from twisted.python import log
from zope.interface import implementer

from ldapauth import interfaces

# Local accounts imported from the directory are named LOCAL_PREFIX + user id.
LOCAL_PREFIX = "LDAP-"

# Stored instead of a password hash, so local authentication can never
# succeed for an imported account.
PASSWORD_MARKER = "LDAP"


def localUsername(username):
    return LOCAL_PREFIX + username


def _text(value):
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def _first(values):
    if not values:
        return None
    return _text(list(values)[0])


class UserAlreadyExists(Exception):
    """A local account with this username already exists"""

    def __init__(self, username):
        Exception.__init__(self, username)
        self.username = username

    def __str__(self):
        return "%s: %s" % (self.__doc__, self.username)


class DirectoryUserRecord:
    """
    What a directory search found out about one user.
    """

    def __init__(self, username=None, displayName=None, email=None):
        self.username = username
        self.displayName = displayName
        self.email = email

    def isEmpty(self):
        return self.displayName is None and self.email is None

    def update(self, attributes):
        """
        Overwrite displayName and email from a search entry's
        C{(name, values)} attribute pairs.
        """
        values = {}
        for name, vals in attributes:
            values[_text(name).lower()] = vals
        self.displayName = _first(values.get("displayname"))
        self.email = _first(values.get("mail"))

    def __eq__(self, other):
        if not isinstance(other, DirectoryUserRecord):
            return NotImplemented
        return (self.username, self.displayName, self.email) == (
            other.username,
            other.displayName,
            other.email,
        )

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "%s(username=%r, displayName=%r, email=%r)" % (
            self.__class__.__name__,
            self.username,
            self.displayName,
            self.email,
        )


class LocalUser:
    def __init__(
        self,
        username,
        displayName=None,
        email=None,
        passwordMarker=None,
        isExternal=False,
    ):
        self.username = username
        self.displayName = displayName
        self.email = email
        self.passwordMarker = passwordMarker
        self.isExternal = isExternal

    @classmethod
    def fromDirectoryRecord(cls, username, record):
        """
        A candidate for import: an external account named C{username}
        carrying the directory's display name and email.
        """
        return cls(
            username=username,
            displayName=record.displayName,
            email=record.email,
            passwordMarker=PASSWORD_MARKER,
            isExternal=True,
        )

    def _values(self):
        return (
            self.username,
            self.displayName,
            self.email,
            self.passwordMarker,
            self.isExternal,
        )

    def __eq__(self, other):
        if not isinstance(other, LocalUser):
            return NotImplemented
        return self._values() == other._values()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self._values())

    def __repr__(self):
        # passwordMarker is never a real password, but keep it out anyway
        return "%s(username=%r, displayName=%r, email=%r, isExternal=%r)" % (
            self.__class__.__name__,
            self.username,
            self.displayName,
            self.email,
            self.isExternal,
        )


class LocalUserReconciler:
    """
    Reads from and imports into the host's L{interfaces.ILocalUserStore}.

    Existing accounts are never modified.
    """

    def __init__(self, store):
        self.store = store

    def find(self, name):
        return defer.maybeDeferred(self.store.findUserByName, name)

    def importUser(self, candidate):
        d = defer.maybeDeferred(self.store.signup, candidate)

        def _imported(user):
            log.msg("Local import of %s successful" % candidate.username)
            return user

        d.addCallback(_imported)
        return d


@implementer(interfaces.ILocalUserStore)
class InMemoryUserStore:
    """
    A local user store kept in a dict, for tools and tests.
    """

    def __init__(self, users=()):
        self._users = {}
        for user in users:
            self._users[user.username] = user

    def findUserByName(self, name):
        return defer.succeed(self._users.get(name))

    def signup(self, user):
        if user.username in self._users:
            return defer.fail(UserAlreadyExists(user.username))
        self._users[user.username] = user
        return defer.succeed(user)

    def __len__(self):
        return len(self._users)

    def __contains__(self, name):
        return name in self._users
