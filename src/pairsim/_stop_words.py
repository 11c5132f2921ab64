"""English stop words dropped by the default Tokenizer before counting."""

STOP_WORDS: frozenset[str] = frozenset({
    # Articles, determiners, quantifiers
    "a", "an", "the", "this", "that", "these", "those",
    "all", "any", "both", "each", "every", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same",
    # Pronouns
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves",
    "you", "your", "yours", "yourself", "yourselves",
    "he", "him", "his", "himself", "she", "her", "hers", "herself",
    "it", "its", "itself", "they", "them", "their", "theirs", "themselves",
    "what", "which", "who", "whom", "whose",
    # Auxiliaries and modals
    "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "having", "do", "does", "did", "doing",
    "will", "would", "shall", "should", "may", "might", "must",
    "can", "could", "ought",
    # Prepositions and conjunctions
    "and", "but", "if", "or", "because", "as", "until", "while",
    "of", "at", "by", "for", "with", "about", "against", "between",
    "into", "through", "during", "before", "after", "above", "below",
    "to", "from", "up", "down", "in", "out", "on", "off", "over", "under",
    "again", "further", "then", "once",
    # Adverbs
    "here", "there", "when", "where", "why", "how",
    "so", "than", "too", "very", "just", "also", "now",
    # Contraction fragments left by [a-z]+ splitting
    "s", "t", "d", "ll", "m", "re", "ve",
    "don", "doesn", "didn", "won", "wouldn", "couldn", "shouldn",
    "isn", "aren", "wasn", "weren", "hasn", "haven", "hadn", "mustn",
})
