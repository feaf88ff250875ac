"""Built-in model exposing the setting stores to plugins as the `setting` service."""


def apply(host, options):
    if host.stores is not None:
        host.provide('setting', host.stores)


def dispose(host):
    host.provide('setting', None)
