class Pid:
    """
    SISO Controller: Cross-Track Error -> Steering Error.
    """
    def __init__(self, kp: float, ki: float, kd: float):
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.prev_error = 0.0
        self.integral = 0.0

    @property
    def coefficients(self) -> tuple:
        return self.kp, self.ki, self.kd

    def get_error(self, cte: float) -> float:
        """
        Compute the steering error signal for the current CTE.
        Output is not bounded, the caller clamps it.
        """
        # Integral
        self.integral += cte
        i_term = self.ki * self.integral

        # Derivative (pas de dt : une trame = un pas)
        d_term = self.kd * (cte - self.prev_error)
        self.prev_error = cte

        # Proportional
        p_term = self.kp * cte

        return -p_term - d_term - i_term
