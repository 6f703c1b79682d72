"""
Single/batch conversion for the Whitted renderer.

Geometry and shading routines accept either one (3,) vector or an (N, 3)
batch of rays. Internally they always work on batches; these helpers add the
leading axis on the way in and strip it again on the way out.
"""


def ensure_batch(arrays):
    """
    Promote (3,) vectors to (1, 3) batches.

    Args:
        arrays: An array, or a list/tuple of arrays

    Returns:
        The same structure with every (3,) vector promoted; other arrays and
        non-array values pass through untouched
    """
    def _is_vector(arr):
        return hasattr(arr, 'ndim') and arr.ndim == 1 and arr.shape[0] == 3

    def _batch(arr):
        return arr[None, :] if _is_vector(arr) else arr

    if isinstance(arrays, (list, tuple)):
        return type(arrays)(_batch(arr) for arr in arrays)
    return _batch(arrays)


def unbatch_if_needed(arrays, was_single):
    """
    Drop the leading length-1 axis again when the caller passed a single ray.

    Works on a single result or on a tuple of results, e.g.

        t, hit = unbatch_if_needed((t_batch, hit_batch), was_single)
    """
    if not was_single:
        return arrays

    def _unbatch(arr):
        if hasattr(arr, 'shape') and arr.ndim >= 1 and arr.shape[0] == 1:
            return arr[0]
        return arr

    if isinstance(arrays, (list, tuple)):
        return type(arrays)(_unbatch(arr) for arr in arrays)
    return _unbatch(arrays)


def detect_single_input(*arrays):
    """
    True when the call is a single-ray call.

    That is the case only if every array argument is one-dimensional. A batch
    call routinely mixes in (3,) arguments such as a shared origin or a sphere
    center, so one 1-D array is not enough. Scalars and non-arrays are ignored.
    """
    dims = [arr.ndim for arr in arrays if hasattr(arr, 'ndim') and arr.ndim > 0]
    return bool(dims) and all(d == 1 for d in dims)


def batch_compatible(func):
    """
    Let a batch-only function also take single rays.

    The wrapped function always sees (N, 3) arrays; its results are returned
    unbatched when the call was a single-ray call.
    """
    def wrapper(*args, **kwargs):
        was_single = detect_single_input(*args)
        batched_args = [ensure_batch(arg) if hasattr(arg, 'ndim') else arg
                        for arg in args]
        result = func(*batched_args, **kwargs)
        return unbatch_if_needed(result, was_single)

    wrapper.__name__ = func.__name__
    wrapper.__doc__ = func.__doc__
    return wrapper
