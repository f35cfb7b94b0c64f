# -*- coding: utf-8 -*-
"""
Bean ordering strategy module

Used to determine the order of Beans injected into collection points and
returned for multi-valued lookups

Priority ranking rules (from highest to lowest):
1. order: Smaller explicit order first (OrderedBean or @component(order=...)),
   beans without an order count as 0
2. Registration order: Earlier registered Bean first (stable sort)
"""

from typing import List, Tuple

from beancontext.di.bean_definition import Bean


class BeanOrderStrategy:
    """
    Bean ordering strategy class

    Order key format: (order_priority,)
    Smaller values indicate higher priority; ties keep registration order
    """

    DEFAULT_ORDER = 0

    @staticmethod
    def calculate_order_key(bean: Bean) -> Tuple[int]:
        """
        Calculate the ordering key for a Bean

        Args:
            bean: Bean

        Returns:
            Tuple[int]: Order key tuple
        """
        order = bean.order if bean.order is not None else BeanOrderStrategy.DEFAULT_ORDER
        return (order,)

    @staticmethod
    def sort_beans(beans: List[Bean]) -> List[Bean]:
        """
        Sort beans for collection injection

        Args:
            beans: Beans in registration order

        Returns:
            List[Bean]: Sorted list, registration order kept between equal keys
        """
        return sorted(beans, key=BeanOrderStrategy.calculate_order_key)
