"""Built-in model exposing the template registry to plugins as the `template` service."""


def apply(host, options):
    if host.templates is not None:
        host.provide('template', host.templates)


def dispose(host):
    host.provide('template', None)
