"""
Test cases for the ldapauth.users module.
"""

from twisted.internet import defer
from twisted.trial import unittest

from ldapauth import users


class TestDirectoryUserRecord(unittest.TestCase):
    def test_empty(self):
        self.assertTrue(users.DirectoryUserRecord("alice").isEmpty())
        self.assertFalse(users.DirectoryUserRecord("alice", email="a@x.com").isEmpty())

    def test_updateOverwrites(self):
        record = users.DirectoryUserRecord("alice", "Old", "old@x.com")
        record.update([("mail", ["new@x.com"])])
        self.assertIdentical(record.displayName, None)
        self.assertEqual(record.email, "new@x.com")

    def test_updateIgnoresCaseAndOtherAttributes(self):
        record = users.DirectoryUserRecord("alice")
        record.update(
            [
                ("cn", ["alice"]),
                ("DISPLAYNAME", ["Alice"]),
                ("Mail", []),
            ]
        )
        self.assertEqual(record.displayName, "Alice")
        self.assertIdentical(record.email, None)


class TestLocalUser(unittest.TestCase):
    def test_localUsername(self):
        self.assertEqual(users.localUsername("alice"), "LDAP-alice")

    def test_fromDirectoryRecord(self):
        record = users.DirectoryUserRecord("alice", "Full Name", "e@x.com")
        self.assertEqual(
            users.LocalUser.fromDirectoryRecord("LDAP-alice", record),
            users.LocalUser(
                "LDAP-alice",
                displayName="Full Name",
                email="e@x.com",
                passwordMarker="LDAP",
                isExternal=True,
            ),
        )

    def test_reprHidesPasswordMarker(self):
        user = users.LocalUser("bob", passwordMarker="LDAP")
        self.assertNotIn("passwordMarker", repr(user))


class TestInMemoryUserStore(unittest.TestCase):
    def test_find(self):
        bob = users.LocalUser("bob")
        store = users.InMemoryUserStore([bob])
        self.assertIdentical(self.successResultOf(store.findUserByName("bob")), bob)
        self.assertIdentical(self.successResultOf(store.findUserByName("eve")), None)

    def test_signup(self):
        store = users.InMemoryUserStore()
        carol = users.LocalUser("carol")
        self.assertIdentical(self.successResultOf(store.signup(carol)), carol)
        self.assertIn("carol", store)
        self.assertEqual(len(store), 1)

    def test_signupExisting(self):
        store = users.InMemoryUserStore([users.LocalUser("carol")])
        f = self.failureResultOf(
            store.signup(users.LocalUser("carol", displayName="Other")),
            users.UserAlreadyExists,
        )
        self.assertEqual(f.value.username, "carol")
        self.assertEqual(len(store), 1)


class SyncStore:
    """A store answering without Deferreds."""

    def __init__(self):
        self.created = []

    def findUserByName(self, name):
        return None

    def signup(self, user):
        self.created.append(user)
        return user


class TestLocalUserReconciler(unittest.TestCase):
    def test_findDelegates(self):
        bob = users.LocalUser("LDAP-bob")
        reconciler = users.LocalUserReconciler(users.InMemoryUserStore([bob]))
        self.assertIdentical(self.successResultOf(reconciler.find("LDAP-bob")), bob)

    def test_synchronousStore(self):
        store = SyncStore()
        reconciler = users.LocalUserReconciler(store)
        d = reconciler.find("LDAP-bob")
        self.assertIsInstance(d, defer.Deferred)
        self.assertIdentical(self.successResultOf(d), None)

        bob = users.LocalUser("LDAP-bob")
        self.assertIdentical(self.successResultOf(reconciler.importUser(bob)), bob)
        self.assertEqual(store.created, [bob])

    def test_storeRaises(self):
        class BrokenStore(SyncStore):
            def signup(self, user):
                raise ValueError("no space left")

        reconciler = users.LocalUserReconciler(BrokenStore())
        self.failureResultOf(reconciler.importUser(users.LocalUser("x")), ValueError)
