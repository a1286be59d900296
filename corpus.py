"""
Formats dialogue data as a list of examples:

  (word ids of line 2 reversed, <go> + word ids of line 1 + <eos>)

i.e. the encoder reads a reply and the decoder learns the line it answers.
Also builds (or loads) the vocabulary.
"""
import os
from typing import NamedTuple

import torch
from datasets import load_dataset
from tqdm import tqdm

from vocab import build_vocab, encode_text, load_vocab, save_vocab, tensor_from_ids
from word_tokenizer import TokenizationError
from batches import BatchIterator

# Default options
VOCAB_SIZE = -1          # <= 0 keeps every word
MAX_EXAMPLE_LEN = 25     # Maximum number of words in an example sentence
LOAD_FIRST = 0           # Only use the first N rows (0 = all rows)
VOCAB_PATH = os.path.join("data", "vocab.pt")


class Example(NamedTuple):
    input_ids: torch.Tensor
    target_ids: torch.Tensor


def load_samples(path):
    """Reads a CSV file (with a header row) into a list of (line, line) tuples."""
    print(f"Reading samples from {path}...")
    # Only truly empty cells are missing; lines such as "None" or "NA" are dialogue
    dataset = load_dataset("csv", data_files=str(path), split="train", keep_default_na=False)
    first, second = dataset.column_names[:2]

    def as_text(value):
        if value is None or isinstance(value, str):
            return value or None
        return str(value)

    return [(as_text(a), as_text(b)) for a, b in zip(dataset[first], dataset[second])]


class DialogCorpus:
    def __init__(self, samples, vocab_size=VOCAB_SIZE, max_example_len=MAX_EXAMPLE_LEN,
                 load_first=LOAD_FIRST, vocab_path=VOCAB_PATH, show_progress=True):
        if max_example_len < 1:
            raise ValueError(f"max_example_len must be at least 1, got {max_example_len}")

        self.samples = samples
        self.vocab_size = vocab_size
        self.max_example_len = max_example_len
        self.load_first = load_first
        self.vocab_path = vocab_path
        self.show_progress = show_progress

        self.vocab = None
        self.examples = []
        self.skipped_samples = 0

    @classmethod
    def from_csv(cls, path, **options):
        return cls(load_samples(path), **options)

    @property
    def examples_count(self):
        return len(self.examples)

    @property
    def rows(self):
        """The corpus rows in use, honouring load_first."""
        if self.load_first > 0:
            return self.samples[:self.load_first]
        return self.samples

    def load(self, vocab_only=False):
        """Loads the cached vocabulary (building and caching it if needed), then the examples."""
        if self.vocab_path and os.path.exists(self.vocab_path):
            print(f"Loading vocabulary from {self.vocab_path} ...")
            self.vocab = load_vocab(self.vocab_path)
        else:
            if self.vocab_path:
                print(f"{self.vocab_path} not found")
            self.build_vocab()
            if self.vocab_path:
                print(f"Writing {self.vocab_path} ...")
                save_vocab(self.vocab, self.vocab_path)

        if vocab_only:
            return

        print("-- Loading samples")
        self.read_samples()
        self.shuffle_examples()

    def build_vocab(self):
        self.vocab = build_vocab(self.rows, self.vocab_size, show_progress=self.show_progress)
        return self.vocab

    def read_samples(self, swap=False):
        """
        Ingests every corpus row. By default the second line of a row is the input
        and the first line the target; swap=True uses the opposite direction.
        """
        if self.vocab is None:
            self.build_vocab()

        for row in tqdm(self.rows, desc="Reading samples", unit="row", disable=not self.show_progress):
            first, second = row[0], row[1]
            try:
                if swap:
                    self.process_sample(first, second)
                else:
                    self.process_sample(second, first)
            except TokenizationError as e:
                self.skipped_samples += 1
                print(f"Skipping sample: {e}")

        print(f"Created {self.examples_count} examples ({self.skipped_samples} skipped).")

    def process_sample(self, sample_input, sample_target):
        """Encodes one (input, target) pair and appends it to the examples."""
        if not sample_target:
            return None

        input_ids = encode_text(sample_input, self.vocab, self.max_example_len)
        target_ids = encode_text(sample_target, self.vocab, self.max_example_len)
        if input_ids is None or target_ids is None:
            return None

        # The encoder reads the input backwards
        input_ids.reverse()

        target_ids = [self.vocab.go_token] + target_ids + [self.vocab.eos_token]

        example = Example(tensor_from_ids(input_ids), tensor_from_ids(target_ids))
        self.examples.append(example)
        return example

    def shuffle_examples(self, generator=None):
        """Replaces the example order with a random permutation."""
        print("-- Shuffling")
        new_idxs = torch.randperm(len(self.examples), generator=generator)
        self.examples[:] = [self.examples[i] for i in new_idxs.tolist()]

    def batches(self, size):
        """Returns an iterator over consecutive windows of `size` examples."""
        return BatchIterator(self.examples, size)
