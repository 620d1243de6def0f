# %%
import re

# %% [markdown]
# # Layer 0: Tokens
#
# `Tokenizer` splits text into words. `tokens()` returns the words in order.

# %%
class Tokenizer:
    def __init__(self, text):
        self.text = text

    def tokens(self):
        return re.findall(r"\w+", self.text)

# %% [markdown] tags=[draft]
# Next: counting. Maybe a Counter.

# %% [markdown]
# # Layer 1: Counts
#
# `CountingTokenizer` extends `Tokenizer`. `counts()` maps each word to the
# number of times it appears.

# %%
class CountingTokenizer(Tokenizer):
    def counts(self):
        result = {}
        for token in self.tokens():
            result[token] = result.get(token, 0) + 1
        return result

# %% tags=[scratch]
CountingTokenizer("a b a").counts()
