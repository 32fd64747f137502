"""
Command line argument/options available to ldapauth tools.
"""
from twisted.python import usage, reflect
from twisted.python.usage import UsageError

__all__ = [
    "Options",
    "Options_config",
    "Options_timeout",
    "UsageError",
]


class Options(usage.Options):
    optParameters = ()

    def postOptions(self):
        postOpt = {}
        reflect.addMethodNamesToDict(self.__class__, postOpt, "postOptions_")
        for name in postOpt.keys():
            method = getattr(self, "postOptions_" + name)
            method()


class Options_config:
    """
    Mixin for providing the --config option.
    """

    def opt_config(self, value):
        """Read configuration from this file (may be repeated)"""
        self.opts.setdefault("config", []).append(value)

    opt_c = opt_config

    def postOptions_config(self):
        if "config" not in self.opts:
            self.opts["config"] = None


class Options_timeout:
    optParameters = (
        ("timeout", None, None, "seconds to wait for the LDAP server"),
    )

    def postOptions_timeout(self):
        val = self.opts["timeout"]
        if val is not None:
            try:
                val = float(val)
            except ValueError:
                raise usage.UsageError("timeout value must be numeric")
            if val <= 0:
                raise usage.UsageError("timeout value must be positive")
            self.opts["timeout"] = val
