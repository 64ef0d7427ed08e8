"""
IoT Hub core.

Credential hashing, stateless session tokens, the quota-enforced
device/schedule registry and the once-per-minute schedule matcher.
Nothing in this package knows about HTTP; the web layer lives in
iothub_web.
"""

__version__ = "0.1.0"
