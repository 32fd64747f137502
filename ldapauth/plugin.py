"""
The host application's view of LDAP authentication.

The host dispatches its hook names to the callables in
L{LDAPAuthenticationPlugin.handlers}:

 - The configuration menu gets our inputs, and saved or loaded
   configuration replaces ours wholesale.

 - On presenter login we first check LDAP. If LDAP says no, the host
   does whatever local authentication it normally does. If LDAP says
   yes, the host skips its own authentication and uses the local
   account we found or imported.

 - Room entry for clients shows a login form, and the credentials
   must pass LDAP; there is no local fallback.
"""

from twisted.cred.credentials import UsernamePassword
from twisted.python import log

from ldapauth import config, policy
from ldapauth.config import USER_ID

MENU_INPUTS = (
    {
        "key": "hostname",
        "label": 'LDAP host, such as "ldaps://ldap.yourdomain.com"',
        "placeholder": "Enter your LDAP host",
        "value": "",
    },
    {
        "key": "bindDNFormat",
        "label": 'LDAP bind DN format - use "%s" as a placeholder for where'
        " the user's id will be (this will probably look something like"
        ' "CN=%s")' % (USER_ID, USER_ID),
        "placeholder": "Enter your LDAP bind DN format",
        "value": "",
    },
    {
        "key": "baseDN",
        "label": "LDAP base DN (this will probably look something like"
        ' "DC=ldap,DC=yourdomain,DC=com")',
        "placeholder": "Enter your LDAP base DN",
        "value": "",
    },
    {
        "key": "presenterFilter",
        "label": 'LDAP filter expression for presenter accounts - use "%s" as'
        " a placeholder for where the user's id will be (this will probably"
        ' look something like "(&(CN=%s)(objectClass=person))")' % (USER_ID, USER_ID),
        "placeholder": "Enter your LDAP filter for presenters",
        "value": "",
    },
    {
        "key": "clientFilter",
        "label": 'LDAP filter expression for client lookups - use "%s" as'
        " a placeholder for where the user's id will be (this will probably"
        ' look something like "(&(CN=%s)(objectClass=person))")' % (USER_ID, USER_ID),
        "placeholder": "Enter your LDAP filter for clients",
        "value": "",
    },
)


def credentialsFromRequest(auth):
    """
    Convert the host's C{{"user": ..., "password": ...}} login data.
    """
    if not auth:
        return None
    return UsernamePassword(auth.get("user"), auth.get("password"))


def _deliver(d, callback):
    """
    Report the outcome of C{d} as C{callback(err, user)}.
    """
    if callback is None:
        return d

    def _ok(user):
        callback(None, user)

    def _failed(reason):
        callback(reason.value, None)

    d.addCallbacks(_ok, _failed)
    d.addErrback(log.err, "Authentication callback raised")
    return d


class LDAPAuthenticationPlugin:
    name = config.DOCUMENT_NAME

    def __init__(self, userStore, clientFactory=None, reactor=None):
        self.authenticator = policy.LDAPAuthenticator(
            userStore, clientFactory=clientFactory, reactor=reactor
        )
        self.handlers = {
            "plugin:configMenuInputs": [self.configMenu],
            "plugin:menuSave": [self.menuSave],
            "plugin:configLoaded": [self.configLoaded],
            "auth:presenterAuth": [self.presenterAuth],
            "auth:clientUI": [self.clientUI],
            "auth:clientAuth": [self.clientAuth],
        }

    @property
    def config(self):
        return self.authenticator.config

    def configMenu(self, menu):
        log.msg("Configuration menu requested")
        menu["inputs"] = [dict(i) for i in MENU_INPUTS]

    def menuSave(self, data):
        self.setConfig(data)

    def configLoaded(self, documents):
        document = config.findDocument(documents)
        if document is not None:
            self.setConfig(document)

    def setConfig(self, data):
        cfg = config.AuthConfig.fromDocument(data)
        log.msg("LDAP client got config: %r" % cfg)
        self.authenticator.setConfig(cfg)

    def presenterAuth(self, auth, callback=None):
        d = self.authenticator.presenterAuth(credentialsFromRequest(auth))
        return _deliver(d, callback)

    def clientAuth(self, auth, callback=None):
        d = self.authenticator.clientAuth(credentialsFromRequest(auth))
        return _deliver(d, callback)

    def clientUI(self, locals):
        """Ask the host to put name and password on the room entry form."""
        locals["auth"] = True

    def onDisable(self):
        log.msg("LDAP Authentication disabled")
