import os.path
import configparser

from zope.interface import implementer

from ldaptor.protocols import pureldap

from ldapauth import interfaces, errors

# Marks where the user id goes in bind DN formats and search filters.
USER_ID = "{{user id}}"

# Name of the host's configuration document for this plugin.
DOCUMENT_NAME = "ldap-authentication"

DEFAULT_TIMEOUT = 30

# (attribute, "required" label, placeholder label or None, ini option)
FIELDS = (
    ("hostname", "Hostname", None, "hostname"),
    ("bindDNFormat", "Bind DN format", "bindDN", "bind-dn-format"),
    ("baseDN", "Base DN", None, "base-dn"),
    ("presenterFilter", "Presenter filter", "presenter filter", "presenter-filter"),
    ("clientFilter", "Client filter", "client filter", "client-filter"),
)


def substitute(template, username):
    """
    Put C{username} in place of every L{USER_ID} in C{template}.
    """
    return template.replace(USER_ID, username)


def substituteFilter(template, username):
    """
    Like L{substitute}, but escapes C{*}, C{(}, C{)} and C{\\} in
    C{username} so it only ever matches itself in a search filter.
    """
    return substitute(template, pureldap.escape(username))


def validateConfig(cfg):
    """
    Return a list of L{errors.ConfigurationError}s, empty when C{cfg}
    is usable.
    """
    if cfg is None:
        return [errors.NoConfiguration()]

    problems = []
    for name, label, placeholderLabel, _ in FIELDS:
        value = getattr(cfg, name, None)
        if not value:
            problems.append(errors.MissingField(name, label))
        elif placeholderLabel is not None and USER_ID not in value:
            problems.append(errors.MissingPlaceholder(name, placeholderLabel, USER_ID))
    return problems


@implementer(interfaces.IAuthConfig)
class AuthConfig:
    hostname = None
    bindDNFormat = None
    baseDN = None
    presenterFilter = None
    clientFilter = None
    timeout = DEFAULT_TIMEOUT

    def __init__(
        self,
        hostname=None,
        bindDNFormat=None,
        baseDN=None,
        presenterFilter=None,
        clientFilter=None,
        timeout=None,
    ):
        if hostname is not None:
            self.hostname = hostname
        if bindDNFormat is not None:
            self.bindDNFormat = bindDNFormat
        if baseDN is not None:
            self.baseDN = baseDN
        if presenterFilter is not None:
            self.presenterFilter = presenterFilter
        if clientFilter is not None:
            self.clientFilter = clientFilter
        if timeout is not None:
            self.timeout = float(timeout)

    @classmethod
    def fromDocument(cls, data):
        """
        Build a configuration from a host document, copying only the
        five directory fields. The timeout keeps its default; it is
        set from ini files or the command line.
        """
        kw = {}
        for name, _, _, _ in FIELDS:
            kw[name] = data.get(name)
        return cls(**kw)

    @classmethod
    def fromConfigParser(cls, parser, section=DOCUMENT_NAME):
        kw = {}
        if parser.has_section(section):
            for name, _, _, option in FIELDS:
                kw[name] = parser.get(section, option, fallback=None)
            kw["timeout"] = parser.get(section, "timeout", fallback=None)
        return cls(**kw)

    def copy(self, **kw):
        for name, _, _, _ in FIELDS:
            if name not in kw:
                kw[name] = getattr(self, name)
        if "timeout" not in kw:
            kw["timeout"] = self.timeout
        return self.__class__(**kw)

    def validate(self):
        return validateConfig(self)

    def getBindDN(self, username):
        return substitute(self.bindDNFormat, username)

    def getPresenterFilter(self, username):
        return substituteFilter(self.presenterFilter, username)

    def getClientFilter(self, username):
        return substituteFilter(self.clientFilter, username)

    def __eq__(self, other):
        if not isinstance(other, AuthConfig):
            return NotImplemented
        return self._values() == other._values()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self._values())

    def _values(self):
        return tuple(getattr(self, name) for name, _, _, _ in FIELDS) + (self.timeout,)

    def __repr__(self):
        fields = ", ".join(
            "%s=%r" % (name, getattr(self, name)) for name, _, _, _ in FIELDS
        )
        return "%s(%s, timeout=%r)" % (self.__class__.__name__, fields, self.timeout)


CONFIG_FILES = [
    "/etc/ldapauth/global.cfg",
    os.path.expanduser("~/.ldapauth/global.cfg"),
]


def loadConfig(configFiles=None):
    """
    Read the configuration files into a new ConfigParser.
    """
    x = configparser.ConfigParser(interpolation=None)
    if configFiles is None:
        configFiles = CONFIG_FILES
    x.read(configFiles)
    return x


def findDocument(documents):
    """
    Pick this plugin's document out of the host's configuration
    documents, or return C{None}.
    """
    for document in documents:
        if document.get("name") == DOCUMENT_NAME:
            return document
    return None
