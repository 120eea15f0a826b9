import configparser
import inspect
import logging
import os
import re

from OrbitalTools.const import ORBITALLIB, ORBITALTOOLS

config = configparser.ConfigParser(interpolation=None, comment_prefixes=("#"))
for filename in [
    os.path.join(ORBITALTOOLS, "config.ini"),
    os.path.join(ORBITALLIB, "config.ini"),
]:
    try:
        config.read(filename)
    except configparser.MissingSectionHeaderError:
        # add global options to default section
        with open(filename) as f:
            contents = "[DEFAULT]\n" + f.read()
        config.read_string(contents)

if "log_level" in config["DEFAULT"]:
    LOGLEVEL = config["DEFAULT"]["log_level"].upper()
else:
    LOGLEVEL = "WARNING"

# 0 means one thread per CPU
N_JOBS = config["DEFAULT"].getint("n_jobs", fallback=0)
if not N_JOBS:
    N_JOBS = os.cpu_count() or 1
CHUNK_SIZE = max(1, config["DEFAULT"].getint("chunk_size", fallback=4096))

logging.logThreads = 0
logging.logProcesses = 0

logging.captureWarnings(True)


class CustomFilter(logging.Filter):
    def __init__(self, name="", level=None, override=None):
        super().__init__(name=name)

        self.level = logging.WARNING
        if isinstance(level, str):
            level = getattr(logging, level.upper())
        if level is not None:
            self.level = level
        self.override = {}
        if override is not None:
            self.override = override

    def filter(self, record):
        for level, func_list in self.override.items():
            if isinstance(level, str):
                level = getattr(logging, level.upper())
            if record.funcName not in func_list:
                continue
            if record.levelno < level:
                return False
            self.parse_message(record)
            return True
        if record.levelno < self.level:
            return False
        self.parse_message(record)
        return True

    def parse_message(self, record):
        """
        Formats message to print prettily to console
        """
        if isinstance(record.msg, str):
            record.msg = re.sub(
                r"\n(\S)", lambda x: "\n  %s" % x.group(1), record.msg
            )
        msg = ["\n  "]
        for word in re.findall(r"\S+\s*", record.getMessage()):
            if len("".join(msg).split("\n")[-1]) + len(word) < 80:
                msg.append(word)
            else:
                msg.append("\n  {}".format(word))
        record.getMessage = lambda: "".join(msg)


class ATLogger(logging.Logger):
    def __init__(
        self, name, level=None, override=None, fmt=None, add_hdlrs=None
    ):
        """
        :level: the log level to use
        :override: dict(level=funcName) to override loglevel for certain funcitons
        :fmt: formatting string (optional)
        :add_hdlrs: list(str(handlerName)) or list(Handler())
        """
        super().__init__(name, level=1)
        if level is None:
            level = LOGLEVEL
        if isinstance(level, str):
            level = getattr(logging, level.upper())
        self.level = level
        if fmt is None:
            fmt = "%(levelname)s %(name)s.%(funcName)s %(message)s"

        formatter = logging.Formatter(fmt=fmt)
        handlers = [logging.StreamHandler()]
        if add_hdlrs is not None:
            for hdlr in add_hdlrs:
                if isinstance(hdlr, str):
                    hdlr = getattr(logging, hdlr)()
                handlers.append(hdlr)
        for hdlr in handlers:
            hdlr.setFormatter(formatter)
            hdlr.addFilter(
                CustomFilter(name=name, level=self.level, override=override)
            )
            self.addHandler(hdlr)

    def setLevel(self, level):
        super().setLevel(level)
        # not registered with logging.getLogger, so the manager
        # never clears our isEnabledFor cache
        self._cache.clear()


def getlogger(name=None, level=None, override=None, fmt=None):
    """
    Get the logger without using the class decorator
    :level: the log level to apply, defaults to WARNING
    :override: a dictionary of the form {new_level: function_name_list} will apply the
        `new_level` to log records produced from functions with names in
        `function_name_list`, eg:
            override={"DEBUG": ["some_function"]}
        will set the log level to DEBUG for any messages produced during the run of
        some_function()
    """
    if name is None:
        package = None
        for frame in reversed(inspect.stack()):
            res = inspect.getargvalues(frame.frame)
            if "__name__" in res.locals and name is None:
                name = res.locals["__name__"]
            if "__package__" in res.locals and package is None:
                package = res.locals["__package__"]
            if name is not None and package is not None:
                break
        name = "{}{}{}".format(
            name if name is not None else "",
            "." if package is not None else "",
            package if package is not None else "",
        )
    log = ATLogger(name, level=level, override=override, fmt=fmt)
    return log


def addlogger(cls):
    """
    Import this function and use it as a class decorator.
    Log messages using the created LOG class attribute.

    Useful class attributes to set that will be picked up by this decorator:
    :LOG: Will be set to the logger instance during class initialization
    :LOGLEVEL: Set this to use a different log level than what is in your config. Only
        do this for testing purposes.
    :LOGLEVEL_OVERRIDE: Use this dict to override the log level set in the config file
        for records originating in particular functions. Keys are log levels, values
        are lists of strings corresponding to function names (default: {})

    Example:
    ```
    from OrbitalTools import addlogger

    @addlogger
    class Someclass:
        LOG = None
        LOGLEVEL = "WARNING"
        LOGLEVEL_OVERRIDE = {"DEBUG": ["some_function"]}

        def some_function(self):
            # this message will be printed thanks to LOGLEVEL_OVERRIDE
            self.LOG.debug("function called")
    ```
    """
    name = "{}.{}".format(cls.__module__, cls.__name__)
    level = None
    if hasattr(cls, "LOGLEVEL") and cls.LOGLEVEL is not None:
        level = cls.LOGLEVEL
    override = None
    if hasattr(cls, "LOGLEVEL_OVERRIDE") and cls.LOGLEVEL_OVERRIDE is not None:
        override = cls.LOGLEVEL_OVERRIDE

    cls.LOG = ATLogger(name, level=level, override=override)
    return cls
