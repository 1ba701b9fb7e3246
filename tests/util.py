def contains_list(full_list, sub_list) -> bool:
    """
    Return True if sub_list appears in full_list as a run of consecutive items.
    """
    sub_len = len(sub_list)
    return any(
        full_list[offset:offset + sub_len] == sub_list
        for offset in range(len(full_list) - sub_len + 1)
    )
