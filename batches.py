from enum import Enum
from typing import NamedTuple

import torch
from torch.nn.utils.rnn import pad_sequence

from vocab import PAD_token


class PadSide(Enum):
    LEFT = "left"    # right-aligned: padding fills the leading rows
    RIGHT = "right"  # left-aligned: padding fills the trailing rows


# Padding policy for each tensor of a batch
ENCODER_PADDING = PadSide.LEFT
DECODER_PADDING = PadSide.RIGHT


class Batch(NamedTuple):
    encoder_inputs: torch.Tensor   # (max_input_len, batch)
    decoder_inputs: torch.Tensor   # (max_target_len - 1, batch)
    decoder_targets: torch.Tensor  # (max_target_len - 1, batch)


def pad_columns(sequences, side):
    """
    Stacks 1-D sequences as the columns of a zero padded matrix of shape
    (longest sequence, number of sequences).
    """
    if side is PadSide.RIGHT:
        return pad_sequence(sequences, batch_first=False, padding_value=PAD_token)

    # Flip each sequence, pad on the right, then flip the rows back so every
    # sequence ends on the last row.
    flipped = [seq.flip(0) for seq in sequences]
    return pad_sequence(flipped, batch_first=False, padding_value=PAD_token).flip(0)


class BatchIterator:
    """
    Walks a list of examples in consecutive windows of `size`.

    The example order is captured when the iterator is created, so shuffling
    the corpus afterwards only affects iterators created later.
    """

    def __init__(self, examples, size):
        if size < 1:
            raise ValueError(f"Batch size must be at least 1, got {size}")
        self.examples = tuple(examples)
        self.size = size
        self.cursor = 0
        self.done = False

    def __iter__(self):
        return self

    def __next__(self):
        batch = self.next_batch()
        if batch is None:
            raise StopIteration
        return batch

    def __len__(self):
        """Number of batches left to draw."""
        remaining = len(self.examples) - self.cursor
        return 0 if self.done else -(-remaining // self.size)

    def next_batch(self):
        """Returns the next Batch, or None once every example has been drawn."""
        if self.done:
            return None

        window = self.examples[self.cursor:self.cursor + self.size]
        self.cursor += len(window)
        if not window:
            self.done = True
            return None

        input_seqs = [example.input_ids for example in window]
        target_seqs = [example.target_ids for example in window]

        encoder_inputs = pad_columns(input_seqs, ENCODER_PADDING)
        # Teacher forcing: decoder input drops <eos>, decoder target drops <go>
        decoder_inputs = pad_columns([seq[:-1] for seq in target_seqs], DECODER_PADDING)
        decoder_targets = pad_columns([seq[1:] for seq in target_seqs], DECODER_PADDING)

        return Batch(encoder_inputs, decoder_inputs, decoder_targets)
