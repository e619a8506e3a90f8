"""
Plate load optimizer.

Decomposes a target barbell weight into bar, collars and plates per side.
The search maximizes 45s first, then fills the remainder greedily with the
other denominations, heaviest first. If the target cannot be reached
exactly, the heaviest achievable load below it is returned instead.
"""

from typing import List, Optional, Tuple

from liftr.errors import InvalidInput, NoFeasibleConfiguration
from liftr.schemas import (
    LARGE_PLATE_THRESHOLD,
    InventorySnapshot,
    LoadConfiguration,
    PlateConfiguration,
)

STANDARD_PLATE = 45.0
AUTO_LARGE_PLATE_TARGET = 505.0
EPSILON = 0.01

DEFAULT_WARMUP_PERCENTAGES = (0.40, 0.60, 0.80)


class PlateLoadOptimizer:
    """
    Finds plate configurations for target weights.

    Stateless; every call receives its own inventory snapshot and never
    modifies it.
    """

    def calculate(self, target_weight: float, inventory: InventorySnapshot) -> LoadConfiguration:
        """
        Calculate the plate configuration for a target weight.

        Collars are added on top of the target; they never take part in the
        plate search.

        Args:
            target_weight: Desired bar + plate weight
            inventory: Plates, bar and collars available

        Returns:
            LoadConfiguration, exact when possible, otherwise rounded down

        Raises:
            InvalidInput: If the target is not positive or lighter than the bar
            NoFeasibleConfiguration: If not a single plate can be placed
        """
        if target_weight <= 0:
            raise InvalidInput(f"Target weight must be positive, got {target_weight}")

        weight_from_plates = target_weight - inventory.bar_weight
        if weight_from_plates < 0:
            raise InvalidInput(
                f"Target weight {target_weight:g} is lighter than the {inventory.bar_weight:g} bar"
            )

        weight_per_side = weight_from_plates / 2.0
        use_large = inventory.use_large_plates or target_weight > AUTO_LARGE_PLATE_TARGET

        exact = self._find_configuration(weight_per_side, inventory, use_large, allow_round_down=False)
        if exact is not None:
            return self._build_result(target_weight, inventory, exact, is_exact=True)

        rounded = self._find_configuration(weight_per_side, inventory, use_large, allow_round_down=True)
        if rounded is not None:
            return self._build_result(target_weight, inventory, rounded, is_exact=False)

        raise NoFeasibleConfiguration(target_weight, inventory.bar_weight)

    def _find_configuration(
        self,
        weight_per_side: float,
        inventory: InventorySnapshot,
        use_large: bool,
        allow_round_down: bool,
    ) -> Optional[List[PlateConfiguration]]:
        """
        Greedy fill of one side of the bar.

        Returns:
            Plates per side (heaviest first), or None when the pass fails
        """
        remaining = weight_per_side
        plates = inventory.plates
        per_side = {weight: inventory.per_side(weight) for weight in plates}
        used: List[Tuple[float, int]] = []

        # Step 1: as many 45s as the load and inventory allow
        available = per_side.get(STANDARD_PLATE, 0)
        if available > 0:
            to_use = min(int((remaining + EPSILON / 10) // STANDARD_PLATE), available)
            if to_use > 0:
                used.append((STANDARD_PLATE, to_use))
                remaining -= STANDARD_PLATE * to_use
                per_side[STANDARD_PLATE] = available - to_use

        if remaining < EPSILON:
            return self._sorted(used)

        # Step 2: fill the rest from the other denominations, heaviest first
        if use_large:
            fillers = [w for w in plates if w != STANDARD_PLATE]
        else:
            fillers = [w for w in plates if w < LARGE_PLATE_THRESHOLD]

        for plate_weight in sorted(fillers, reverse=True):
            available = per_side.get(plate_weight, 0)
            if available <= 0:
                continue
            to_use = min(int((remaining + EPSILON / 10) // plate_weight), available)
            if to_use <= 0:
                continue
            used.append((plate_weight, to_use))
            remaining -= plate_weight * to_use
            per_side[plate_weight] = available - to_use
            if remaining < EPSILON:
                return self._sorted(used)

        if used and allow_round_down:
            return self._sorted(used)
        return None

    @staticmethod
    def _sorted(used: List[Tuple[float, int]]) -> List[PlateConfiguration]:
        return [
            PlateConfiguration(plate_weight=weight, quantity=quantity)
            for weight, quantity in sorted(used, key=lambda item: item[0], reverse=True)
        ]

    @staticmethod
    def _build_result(
        target_weight: float,
        inventory: InventorySnapshot,
        plates: List[PlateConfiguration],
        is_exact: bool,
    ) -> LoadConfiguration:
        per_side = sum(p.plate_weight * p.quantity for p in plates)
        collars = inventory.total_collar_weight
        return LoadConfiguration(
            target_weight=target_weight,
            achieved_weight=inventory.bar_weight + per_side * 2 + collars,
            bar_weight=inventory.bar_weight,
            collar_weight=collars,
            weight_per_side=per_side,
            plates=plates,
            is_exact_match=is_exact,
        )

    def warmup_loads(
        self,
        work_weight: float,
        inventory: InventorySnapshot,
        percentages=DEFAULT_WARMUP_PERCENTAGES,
    ) -> List[LoadConfiguration]:
        """
        Plate loads for warm-up sets leading to a working weight.

        Percentages whose weight does not clear the bar load the empty bar.

        Args:
            work_weight: Working set weight
            inventory: Plates, bar and collars available
            percentages: Fractions of the working weight, ascending

        Returns:
            One LoadConfiguration per percentage followed by the working set
        """
        loads = []
        for pct in list(percentages) + [1.0]:
            target = max(work_weight * pct, inventory.bar_weight)
            loads.append(self.calculate(target, inventory))
        return loads


def calculate_plate_configuration(
    target_weight: float, inventory: InventorySnapshot
) -> LoadConfiguration:
    """Module-level shortcut for PlateLoadOptimizer().calculate."""
    return PlateLoadOptimizer().calculate(target_weight, inventory)
