"""LDAP authentication for presenter and client logins, on Twisted"""
__version__ = "0.3.0"

__title__ = "ldapauth"
__description__ = "LDAP authentication for presenter and client logins, on Twisted"

__license__ = "MIT"
__author__ = "The ldapauth developers"
__copyright__ = "Copyright (c) 2013-2026 {}".format(__author__)
