import logging

from rich.pretty import pprint

from clitree import *

app = Runner(name="git", version="1.0.0")
app.root.config_option()


@app.root.command(name="list")
def listing(settings):
    """List the configuration."""
    pprint(settings)


listing.option("local", "l", descr="Only list the repository configuration.")

push = app.root.command("push", usage="Push the source code.")


@push.command
def origin(settings):
    """Push the source code to the origin."""
    pprint(settings)


origin.option("url", "u", valued=True, default="https://example.com", descr="Remote to push to.")


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    app.main()
