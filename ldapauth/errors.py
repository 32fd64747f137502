"""
Errors raised by ldapauth itself.

Errors reported by the directory server are not wrapped; they arrive
as the matching L{ldaptor.protocols.ldap.ldaperrors} exception, e.g.
C{LDAPInvalidCredentials} for a rejected bind.
"""


class LDAPAuthError(Exception):
    """LDAP authentication failed"""

    def __str__(self):
        return self.__doc__


class ConfigurationError(LDAPAuthError):
    """Invalid LDAP configuration"""

    field = None


class NoConfiguration(ConfigurationError):
    """No configuration has been loaded"""


class MissingField(ConfigurationError):
    def __init__(self, field, label):
        ConfigurationError.__init__(self, field)
        self.field = field
        self.label = label

    def __str__(self):
        return "%s is required" % self.label


class MissingPlaceholder(ConfigurationError):
    def __init__(self, field, label, placeholder):
        ConfigurationError.__init__(self, field)
        self.field = field
        self.label = label
        self.placeholder = placeholder

    def __str__(self):
        return 'Invalid %s format - missing "%s"' % (self.label, self.placeholder)


class MissingConnection(LDAPAuthError):
    """LDAP connection was missing in authentication attempt"""


class BadCredentials(LDAPAuthError):
    """Bad credentials provided"""
