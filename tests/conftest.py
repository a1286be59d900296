import pytest

from corpus import DialogCorpus


@pytest.fixture
def rows():
    return [
        ("Hi there. How are you?", "Hello!"),
        ("Where are you going?", "Home, I think."),
        ("Are you hungry?", "Not really. I ate."),
        ("What time is it?", "Late."),
        ("Come here!", "Why?"),
    ]


@pytest.fixture
def corpus(rows):
    corpus = DialogCorpus(rows, vocab_path=None, show_progress=False)
    corpus.build_vocab()
    corpus.read_samples()
    return corpus
