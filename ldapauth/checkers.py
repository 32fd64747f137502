from zope.interface import implementer
from twisted.cred import checkers, credentials, error
from twisted.python import failure, log


def _textCredentials(creds):
    username = creds.username
    if isinstance(username, bytes):
        username = username.decode("utf-8")
    password = creds.password
    if isinstance(password, bytes):
        password = password.decode("utf-8")
    return credentials.UsernamePassword(username, password)


def _unauthorized(reason, role):
    log.msg(
        "LDAP %s authentication failed: %s" % (role, reason.getErrorMessage())
    )
    return failure.Failure(error.UnauthorizedLogin())


@implementer(checkers.ICredentialsChecker)
class LDAPPresenterChecker:
    """

    The avatarID returned is the username of the local account.

    When LDAP leaves the decision to local authentication, the
    fallback checker decides; without one the login is refused.

    """

    credentialInterfaces = (credentials.IUsernamePassword,)

    def __init__(self, authenticator, fallback=None):
        self.authenticator = authenticator
        self.fallback = fallback

    def _authenticated(self, user, creds):
        if user is None:
            if self.fallback is None:
                raise error.UnauthorizedLogin()
            return self.fallback.requestAvatarId(creds)
        return user.username

    def requestAvatarId(self, creds):
        d = self.authenticator.presenterAuth(_textCredentials(creds))
        d.addCallbacks(
            self._authenticated,
            _unauthorized,
            callbackArgs=(creds,),
            errbackArgs=("presenter",),
        )
        return d


@implementer(checkers.ICredentialsChecker)
class LDAPClientChecker:
    """

    The avatarID returned is the LDAP user id. Users the client
    filter does not match are refused.

    """

    credentialInterfaces = (credentials.IUsernamePassword,)

    def __init__(self, authenticator):
        self.authenticator = authenticator

    def _found(self, record):
        if record.isEmpty():
            raise error.UnauthorizedLogin()
        return record.username

    def requestAvatarId(self, creds):
        d = self.authenticator.clientAuth(_textCredentials(creds))
        d.addCallbacks(self._found, _unauthorized, errbackArgs=("client",))
        return d
