from .polling import click_first_visible, poll_until, settle
from .resource_filter import install_resource_filter, should_block

__all__ = [
    "click_first_visible",
    "install_resource_filter",
    "poll_until",
    "settle",
    "should_block",
]
