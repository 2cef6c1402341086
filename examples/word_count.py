#!/usr/bin/env python3
"""Word Count - the classic three-stage streaming topology.

Random sentences are split into words, and words are counted with a
fields grouping so every occurrence of a word reaches the same counter.

Run: python examples/word_count.py
Or:  stream-spine topology submit examples/word_count.py --env local
"""
from streamspine import TopologyDefinition, start
from streamspine.core.logging import configure_logging


# === Components ===

class RandomSentenceSpout:
    """Emits sentences; adapted through the engine's multilang bridge."""

    sentences = [
        "the cow jumped over the moon",
        "an apple a day keeps the doctor away",
        "four score and seven years ago",
    ]


class SplitSentenceBolt:
    """Splits each sentence into words."""


class WordCountBolt:
    """Keeps a running count per word."""


# === Topology ===

class WordCountTopology(TopologyDefinition):
    def define(self):
        self.spout(RandomSentenceSpout, parallelism=2)

        self.bolt(SplitSentenceBolt, parallelism=4).source(RandomSentenceSpout, "shuffle")
        self.bolt(WordCountBolt, parallelism=3).source(SplitSentenceBolt, {"fields": ["word"]})

        self.configure(hook=self.tune)
        self.on_submit("report")

    def tune(self, config, env):
        config.debug = env == "local"
        if env == "local":
            config.max_task_parallelism = 3
        else:
            config.num_workers = 20
            config.max_spout_pending = 1000

    def report(self, submission, env):
        print(f"submitted {submission.topology_name} to {env}: ids {submission.id_mapping}")


topology = WordCountTopology


def main():
    configure_logging(level="INFO")
    submission = start(WordCountTopology(), "examples", "local")
    for key, value in submission.options.items():
        print(f"  {key} = {value}")


if __name__ == "__main__":
    main()
