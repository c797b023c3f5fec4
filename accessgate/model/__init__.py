"""Access control models, their assertions and policies, and matcher functions."""