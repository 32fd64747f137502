"""
Test cases for the ldapauth-check command line tool.
"""

import io

from twisted.internet import task
from twisted.trial import unittest

from ldapauth import testutil, usage
from ldapauth._scripts import checkauth

CONFIG = """\
[ldap-authentication]
hostname = ldap://ldap.example.com
bind-dn-format = cn={{user id}},ou=people,dc=example,dc=com
base-dn = dc=example,dc=com
presenter-filter = (&(cn={{user id}})(objectClass=person))
client-filter = (&(cn={{user id}})(objectClass=person))
"""

FOUND = [
    testutil.searchEntry("cn=alice,dc=example,dc=com", "Alice", "a@x.com"),
    testutil.searchDone(),
]


class TestOptions(unittest.TestCase):
    def test_defaults(self):
        opts = checkauth.MyOptions()
        opts.parseOptions(["alice"])
        self.assertEqual(opts["username"], "alice")
        self.assertIdentical(opts["config"], None)
        self.assertIdentical(opts["timeout"], None)
        self.assertFalse(opts["client"])

    def test_options(self):
        opts = checkauth.MyOptions()
        opts.parseOptions(
            ["--config", "a.cfg", "-c", "b.cfg", "--timeout", "2.5", "--client", "bob"]
        )
        self.assertEqual(opts["config"], ["a.cfg", "b.cfg"])
        self.assertEqual(opts["timeout"], 2.5)
        self.assertTrue(opts["client"])
        self.assertEqual(opts["username"], "bob")

    def test_badTimeout(self):
        opts = checkauth.MyOptions()
        self.assertRaises(
            usage.UsageError, opts.parseOptions, ["--timeout", "soon", "alice"]
        )
        opts = checkauth.MyOptions()
        self.assertRaises(
            usage.UsageError, opts.parseOptions, ["--timeout", "0", "alice"]
        )

    def test_noUsername(self):
        opts = checkauth.MyOptions()
        self.assertRaises(usage.UsageError, opts.parseOptions, [])


class TestMain(unittest.TestCase):
    def setUp(self):
        self.configFile = self.mktemp()
        with open(self.configFile, "w") as f:
            f.write(CONFIG)
        self.stdout = io.StringIO()

    def run_main(self, client, *args):
        opts = checkauth.MyOptions()
        opts.parseOptions(["--config", self.configFile] + list(args))
        return checkauth.main(
            task.Clock(),
            opts,
            stdin=io.StringIO("s3krit\n"),
            stdout=self.stdout,
            clientFactory=testutil.FakeClientFactory(client),
        )

    def test_presenter(self):
        client = testutil.DirectoryClientTestDriver(testutil.bindSuccess(), FOUND)
        self.successResultOf(self.run_main(client, "alice"))
        self.assertEqual(client.sent[0].dn, "cn=alice,ou=people,dc=example,dc=com")
        self.assertEqual(client.sent[0].auth, "s3krit")
        self.assertIn("LDAP-alice", self.stdout.getvalue())

    def test_presenterFallback(self):
        client = testutil.DirectoryClientTestDriver(testutil.bindFailure())
        self.successResultOf(self.run_main(client, "alice"))
        self.assertEqual(
            self.stdout.getvalue(),
            "no LDAP user; the host would fall back to local auth\n",
        )

    def test_client(self):
        client = testutil.DirectoryClientTestDriver(testutil.bindSuccess(), FOUND)
        self.successResultOf(self.run_main(client, "--client", "alice"))
        self.assertIn("DirectoryUserRecord(username='alice'", self.stdout.getvalue())
