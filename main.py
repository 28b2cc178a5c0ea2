import sys

from rich.pretty import pprint

from trellis import *


def say_hello(output, data):
    template = "HELLO %s!" if data.bool("loud") else "Hello %s"
    for _ in range(data.int("times")):
        output.stdoutln(template % data.string("NAME"))


greet = serial_nodes(
    Description("Greet somebody"),
    FlagProcessor(
        BoolFlag("loud", "l", "Shout the greeting"),
        Flag("times", "t", "Number of greetings", type=int, default=1, validators=(positive(),)),
    ),
    Arg("NAME", "Who to greet"),
    ExecutorProcessor(say_hello),
)

root = BranchNode({
    "greet g": greet,
    "sum": serial_nodes(
        ListArg("N", "Numbers to add", 1, UNBOUNDED, type=int),
        ExecutorProcessor(lambda output, data: output.stdoutln(sum(data.int_list("N")))),
    ),
})


if __name__ == '__main__':
    if sys.argv[1:2] == ["--complete"]:
        pprint(autocomplete(root, " ".join(["main", *sys.argv[2:]])))
    else:
        sys.exit(run(root))
