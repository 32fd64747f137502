from zope.interface import Interface, Attribute


class IAuthConfig(Interface):
    """
    Directory settings for one authentication attempt.

    Templates contain the C{{{user id}}} placeholder, which is
    replaced with the user id being authenticated.
    """

    hostname = Attribute("LDAP URL, such as ldaps://ldap.example.com")
    bindDNFormat = Attribute("DN template used to bind as the user")
    baseDN = Attribute("Where searches start")
    presenterFilter = Attribute("Search filter template for presenters")
    clientFilter = Attribute("Search filter template for clients")
    timeout = Attribute("Seconds to wait for connect, bind or search")

    def getBindDN(username):
        """Return the bind DN for C{username}."""


class IDirectoryClient(Interface):
    """
    The part of L{ldaptor.protocols.ldap.ldapclient.LDAPClient} that
    authentication uses.
    """

    connected = Attribute("True while the connection is up")

    def bind(dn, auth):
        """
        Bind as C{dn} with password C{auth}.

        @return: Deferred that fails with the matching ldaperrors
        exception when the server refuses the bind.
        """

    def send_multiResponse(op, handler, *args, **kwargs):
        """
        Send C{op}, calling C{handler(response, *args, **kwargs)} for
        each response until it returns true.

        @return: Deferred that only ever fires with a failure.
        """

    def unbind():
        """Send an unbind request and close the connection."""


class IDirectoryClientFactory(Interface):
    def connect(hostname):
        """
        Open a connection to the directory named by C{hostname}.

        @return: Deferred IDirectoryClient
        """


class ILocalUserStore(Interface):
    """
    The host's own accounts.
    """

    def findUserByName(name):
        """
        @return: Deferred LocalUser, or None when there is no such user.
        """

    def signup(user):
        """
        Create a local account for C{user}.

        @return: Deferred of the created account.
        """


class IAuthenticator(Interface):
    config = Attribute("The current IAuthConfig, replaced wholesale on update")

    def presenterAuth(credentials):
        """
        Authenticate a presenter.

        @param credentials: IUsernamePassword

        @return: Deferred LocalUser, or None when the host should
        fall back to its local authentication.
        """

    def clientAuth(credentials):
        """
        Authenticate a client. There is no fallback for clients; any
        directory failure fails the Deferred.

        @return: Deferred DirectoryUserRecord
        """
