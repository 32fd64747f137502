"""
Try a login against the configured LDAP directory.

The password is read from the first line of standard input.
"""
import sys

from twisted.cred.credentials import UsernamePassword
from twisted.internet import task

from ldapauth import config, policy, usage, users


def report(result, out):
    if result is None:
        out.write("no LDAP user; the host would fall back to local auth\n")
    else:
        out.write("%r\n" % (result,))
    return result


def main(reactor, opts, stdin=None, stdout=None, clientFactory=None):
    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout

    cfg = config.AuthConfig.fromConfigParser(
        config.loadConfig(configFiles=opts["config"])
    )
    if opts["timeout"] is not None:
        cfg = cfg.copy(timeout=opts["timeout"])

    password = stdin.readline().rstrip("\r\n")
    creds = UsernamePassword(opts["username"], password)
    authenticator = policy.LDAPAuthenticator(
        users.InMemoryUserStore(), cfg, clientFactory=clientFactory, reactor=reactor
    )
    if opts["client"]:
        d = authenticator.clientAuth(creds)
    else:
        d = authenticator.presenterAuth(creds)
    d.addCallback(report, stdout)
    return d


class MyOptions(usage.Options, usage.Options_config, usage.Options_timeout):
    """ldapauth login check utility"""

    synopsis = "Usage: ldapauth-check [options] USERNAME"

    optFlags = (("client", None, "check as a client instead of a presenter"),)

    def parseArgs(self, username):
        self.opts["username"] = username


def console_script():
    from twisted.python import log

    log.startLogging(sys.stderr, setStdout=0)

    try:
        opts = MyOptions()
        opts.parseOptions()
    except usage.UsageError as ue:
        sys.stderr.write(f"{sys.argv[0]}: {ue}\n")
        sys.exit(1)

    task.react(main, (opts,))


if __name__ == "__main__":
    sys.exit(console_script())
