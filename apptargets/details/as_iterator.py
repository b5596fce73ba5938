from typing import List, Set, Tuple, Union, Iterator


# Make scalar string or container of strings iteratable...
def str_iter(strings: Union[str, List[str], Set[str], Tuple[str]]) -> Iterator[str]:
    if isinstance(strings, (list, set, tuple)):
        for v in strings:
            if not isinstance(v, str):
                raise TypeError(f"expected str, got {type(v).__name__}: {v!r}")
            yield v
    elif isinstance(strings, str):
        yield strings
    else:
        raise TypeError(f"expected str or collection, got {type(strings).__name__}")
